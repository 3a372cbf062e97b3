"""
Command line argument parser for the query endpoint configuration.

This module defines the flags a query node uses to declare its Store API
endpoints: static endpoints, strict endpoints, file discovery sources, an
endpoint configuration document and the client TLS settings shared by the
endpoints given on the command line.
"""

from pathlib import Path
import argparse
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, List, Literal, Optional, Self

from src.config.schemas import DEFAULT_SD_REFRESH_INTERVAL, FileSDConfig, TLSConfiguration


class QueryEndpointArguments(BaseModel):
    """Container for the endpoint related arguments of a query node.

    Attributes:
        # Endpoints
        endpoint: Addresses of default mode Store API endpoints
        endpoint_strict: Addresses of strict mode Store API endpoints
        endpoint_sd_files: Path patterns of file discovery sources
        endpoint_sd_interval: Refresh interval of the file discovery sources

        # Configuration document
        endpoint_config_file: Path to the endpoint configuration YAML
        endpoint_config: Endpoint configuration YAML passed inline

        # Client TLS
        grpc_client_tls_cert: Client certificate file
        grpc_client_tls_key: Client key file
        grpc_client_tls_ca: CA certificates file
        grpc_client_server_name: Server name to verify

        # Output
        output: Format of the printed configuration
        log_level: Logging verbosity level
    """

    # Endpoints
    endpoint: List[str] = Field(default_factory=list, description="Default mode endpoint addresses")
    endpoint_strict: List[str] = Field(default_factory=list, description="Strict mode endpoint addresses")
    endpoint_sd_files: List[str] = Field(default_factory=list, description="File discovery path patterns")
    endpoint_sd_interval: str = Field(default=DEFAULT_SD_REFRESH_INTERVAL, description="File discovery refresh interval")

    # Configuration document
    endpoint_config_file: Optional[Path] = Field(default=None, description="Path to the endpoint configuration YAML")
    endpoint_config: Optional[str] = Field(default=None, description="Inline endpoint configuration YAML")

    # Client TLS
    grpc_client_tls_cert: Optional[str] = Field(default=None, description="Client certificate file")
    grpc_client_tls_key: Optional[str] = Field(default=None, description="Client key file")
    grpc_client_tls_ca: Optional[str] = Field(default=None, description="CA certificates file")
    grpc_client_server_name: Optional[str] = Field(default=None, description="Server name to verify")

    # Output
    output: Literal["yaml", "table"] = Field(default="yaml", description="Format of the printed configuration")
    log_level: str = Field(default="INFO", description="Logger level for python logging module")

    @field_validator("endpoint", "endpoint_strict", "endpoint_sd_files", mode="before")
    @classmethod
    def missing_as_empty(cls, value: Any) -> Any:
        # argparse leaves repeatable flags at None when they are never given
        return [] if value is None else value

    @model_validator(mode='after')
    def validate_config_file(self) -> Self:
        """Validate the endpoint configuration file name.

        Setting it together with --endpoint.config is rejected when the
        configuration is read.

        Raises:
            ValueError: If the configuration file isn't a YAML file
        """
        if self.endpoint_config_file is not None and self.endpoint_config_file.suffix not in ('.yaml', '.yml'):
            raise ValueError(f"Endpoint config file must be a .yaml file: {self.endpoint_config_file}")

        return self

    def default_tls(self) -> TLSConfiguration:
        """TLS settings shared by the endpoints given on the command line."""
        return TLSConfiguration(
            cert_file=self.grpc_client_tls_cert,
            key_file=self.grpc_client_tls_key,
            ca_file=self.grpc_client_tls_ca,
            server_name=self.grpc_client_server_name,
        )

    def discovery(self) -> Optional[FileSDConfig]:
        """File discovery source built from --endpoint.sd-files, if any were given."""
        if not self.endpoint_sd_files:
            return None
        return FileSDConfig(files=self.endpoint_sd_files, refresh_interval=self.endpoint_sd_interval)


def parse_arguments(argv: Optional[List[str]] = None) -> QueryEndpointArguments:
    """Parse command-line arguments describing the Store API endpoints of a query node.

    Args:
        argv: Arguments to parse, defaults to sys.argv[1:]

    Returns:
        QueryEndpointArguments: Validated endpoint arguments

    Raises:
        ValueError: If validation fails for any arguments
        SystemExit: If argument parsing fails (raised by argparse)
    """

    parser = argparse.ArgumentParser(
        description='Merge and validate the Store API endpoint configuration of a query node',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    endpoints = parser.add_argument_group('endpoints')
    endpoints.add_argument(
        '--endpoint',
        dest='endpoint',
        action='append',
        metavar='ADDRESS',
        help='Address of a Store API endpoint, may be repeated'
    )
    endpoints.add_argument(
        '--endpoint-strict',
        dest='endpoint_strict',
        action='append',
        metavar='ADDRESS',
        help='Address of a statically configured Store API endpoint that is always used, may be repeated'
    )
    endpoints.add_argument(
        '--endpoint.sd-files',
        dest='endpoint_sd_files',
        action='append',
        metavar='PATTERN',
        help='Path to files containing Store API endpoints (.json, .yml or .yaml), may be repeated'
    )
    endpoints.add_argument(
        '--endpoint.sd-interval',
        dest='endpoint_sd_interval',
        type=str,
        default=DEFAULT_SD_REFRESH_INTERVAL,
        help='Refresh interval to re-read the endpoint discovery files'
    )

    config = parser.add_argument_group('endpoint configuration')
    config.add_argument(
        '--endpoint.config-file',
        dest='endpoint_config_file',
        type=Path,
        default=None,
        help='Path to YAML file describing endpoint groups'
    )
    config.add_argument(
        '--endpoint.config',
        dest='endpoint_config',
        type=str,
        default=None,
        help='Alternative to --endpoint.config-file, YAML content describing endpoint groups'
    )

    tls = parser.add_argument_group('client TLS settings')
    tls.add_argument(
        '--grpc-client-tls-cert',
        type=str,
        default=None,
        help='TLS certificate file to identify this client to the server'
    )
    tls.add_argument(
        '--grpc-client-tls-key',
        type=str,
        default=None,
        help='TLS key file for the client certificate'
    )
    tls.add_argument(
        '--grpc-client-tls-ca',
        type=str,
        default=None,
        help='TLS CA certificates file to verify gRPC servers'
    )
    tls.add_argument(
        '--grpc-client-server-name',
        type=str,
        default=None,
        help='Server name to verify the hostname on the returned gRPC certificates'
    )

    output = parser.add_argument_group('output settings')
    output.add_argument(
        '--output',
        type=str,
        default='yaml',
        choices=['yaml', 'table'],
        help='Format of the printed endpoint configuration'
    )
    output.add_argument(
        '--log.level',
        dest='log_level',
        type=str,
        default="INFO",
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logger level for python logging module'
    )

    args = parser.parse_args(argv)

    # Create and validate QueryEndpointArguments
    return QueryEndpointArguments(**vars(args))
