import re
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Self, Tuple, Optional

from .errors import InvalidModeError


# same pattern file based service discovery accepts for its path globs
SD_FILE_PATTERN = re.compile(r"^[^*]*(\*[^/]*)?\.(json|yml|yaml|JSON|YML|YAML)$")

DURATION_PATTERN = re.compile(
    r"^(([0-9]+)y)?(([0-9]+)w)?(([0-9]+)d)?(([0-9]+)h)?(([0-9]+)m)?(([0-9]+)s)?(([0-9]+)ms)?$"
)

DEFAULT_SD_REFRESH_INTERVAL = "5m"


class EndpointMode(str, Enum):
    """Mode of an endpoint group.

    DEFAULT groups may mix static and discovered endpoints, STRICT groups
    must be fully static.
    """

    DEFAULT = ""
    STRICT = "strict"

    @classmethod
    def parse(cls, raw: Any) -> "EndpointMode":
        """Map a raw decoded mode value onto a known mode.

        Args:
            raw: Value found under the ``mode`` key (None when the key is empty)

        Returns:
            EndpointMode: The matching mode

        Raises:
            InvalidModeError: If the value is not one of the known modes
        """
        if raw is None:
            return cls.DEFAULT
        try:
            return cls(raw)
        except ValueError:
            raise InvalidModeError(raw) from None


class TLSConfiguration(BaseModel):
    """TLS material used to connect to a set of Store API endpoints.

    Leaving every field unset disables TLS for the group.
    """

    cert_file: Optional[str] = Field(default=None, description="TLS certificate file identifying this client")
    key_file: Optional[str] = Field(default=None, description="TLS key file for the client certificate")
    ca_file: Optional[str] = Field(default=None, description="CA certificates file used to verify servers")
    server_name: Optional[str] = Field(default=None, description="Server name to verify on returned certificates")

    @property
    def enabled(self) -> bool:
        return any((self.cert_file, self.key_file, self.ca_file, self.server_name))

    model_config = {"extra": "forbid", "frozen": True}  # forbid extra fields


class FileSDConfig(BaseModel):
    """File based service discovery source.

    Only the shape is validated here, the files themselves are read by the
    discovery mechanism.
    """

    files: Tuple[str, ...] = Field(..., description="Path patterns of the discovery files")
    refresh_interval: str = Field(
        default=DEFAULT_SD_REFRESH_INTERVAL,
        description="How often the files are re-read, e.g. 30s, 5m, 1h30m"
    )

    @field_validator("files")
    @classmethod
    def validate_files(cls, files: Tuple[str, ...]) -> Tuple[str, ...]:
        if len(files) == 0:
            raise ValueError("file service discovery config must contain at least one path name")
        for name in files:
            if not SD_FILE_PATTERN.match(name):
                raise ValueError(f"path name {name!r} is not valid for file discovery")
        return files

    @field_validator("refresh_interval", mode="before")
    @classmethod
    def validate_refresh_interval(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_SD_REFRESH_INTERVAL
        if isinstance(value, str) and value != "0" and (value == "" or not DURATION_PATTERN.match(value)):
            raise ValueError(f"not a valid duration string: {value!r}")
        return value

    model_config = {"extra": "forbid", "frozen": True}


class EndpointGroup(BaseModel):
    """Configuration of one named set of Store API endpoints.

    Validates that a strict group carries no discovery sources. The loader
    performs the same check itself so that mode errors across the whole
    document are reported first.
    """

    name: str = Field(default="", description="Group identifier")
    tls_config: TLSConfiguration = Field(default_factory=TLSConfiguration, description="TLS settings of the group")
    endpoints: Tuple[str, ...] = Field(default=(), description="Static endpoint addresses")
    endpoints_sd_files: Tuple[FileSDConfig, ...] = Field(default=(), description="File discovery sources")
    mode: EndpointMode = Field(default=EndpointMode.DEFAULT, description="Endpoint mode ('' or 'strict')")

    @field_validator("name", "tls_config", "endpoints", "endpoints_sd_files", mode="before")
    @classmethod
    def empty_as_default(cls, value: Any, info) -> Any:
        """Treat keys present without a value as if they were omitted."""
        if value is not None:
            return value
        if info.field_name == "name":
            return ""
        if info.field_name == "tls_config":
            return TLSConfiguration()
        return ()

    @model_validator(mode='after')
    def validate_strict_mode(self) -> Self:
        if self.mode is EndpointMode.STRICT and self.endpoints_sd_files:
            raise ValueError("no sd-files allowed in strict mode")
        return self

    model_config = {"extra": "forbid", "frozen": True}  # forbid extra fields
