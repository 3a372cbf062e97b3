"""This module provides a clean interface for loading and validating the endpoint configuration."""

from .config_loader import load_config, read_path_or_content, dump_config, format_config_table
from .errors import (
    EndpointConfigError,
    DecodeError,
    InvalidModeError,
    ModeConflictError,
    DuplicateEndpointError,
)
from .schemas import EndpointGroup, EndpointMode, FileSDConfig, TLSConfiguration

__all__ = [
    "load_config",
    "read_path_or_content",
    "dump_config",
    "format_config_table",
    "EndpointConfigError",
    "DecodeError",
    "InvalidModeError",
    "ModeConflictError",
    "DuplicateEndpointError",
    "EndpointGroup",
    "EndpointMode",
    "FileSDConfig",
    "TLSConfiguration",
]
