#!/usr/bin/env python3
"""
Main entry point for checking the Store API endpoint configuration of a query node.

This script merges the endpoint groups of an endpoint configuration document with
the endpoints given on the command line, validates the result and prints it.

Endpoint configuration document:
    A YAML list of endpoint groups:

        - name: eu
          tls_config:
            cert_file: /certs/client.crt
            key_file: /certs/client.key
            ca_file: /certs/ca.crt
            server_name: store.eu.example.com
          endpoints:
            - store-eu-0:10901
          endpoints_sd_files:
            - files: ["/etc/query/sd/eu-*.yaml"]
              refresh_interval: 5m
        - name: pinned
          mode: strict
          endpoints:
            - store-pinned:10901

    Unknown fields are rejected. Strict groups may not use endpoints_sd_files and
    every endpoint address may appear only once across all groups.
"""

import logging
import sys
from typing import List, Optional

from src.cli import parse_arguments
from src.config import (
    EndpointConfigError,
    load_config,
    read_path_or_content,
    dump_config,
    format_config_table,
)


def setup_logging(log_level: str) -> None:
    """Set up logging configuration.

    Args:
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point, returns the process exit code."""
    logger = logging.getLogger(__name__)

    try:
        args = parse_arguments(argv)
    except ValueError as e:
        setup_logging("INFO")
        logger.error(f"Invalid arguments: {str(e)}")
        return 1

    setup_logging(args.log_level)

    try:
        logger.info(f"Default mode endpoints: {args.endpoint}")
        logger.info(f"Strict mode endpoints: {args.endpoint_strict}")
        if args.endpoint_sd_files:
            logger.info(f"Endpoint discovery files: {args.endpoint_sd_files} every {args.endpoint_sd_interval}")

        document = read_path_or_content(args.endpoint_config_file, args.endpoint_config)
        if document is None:
            logger.info("No endpoint configuration document given")
        elif args.endpoint_config_file is not None:
            logger.info(f"Endpoint configuration file: {args.endpoint_config_file}")

        default_tls = args.default_tls()
        if not default_tls.enabled:
            logger.debug("TLS disabled for command line endpoints")

        groups = load_config(
            document,
            args.endpoint,
            args.endpoint_strict,
            args.discovery(),
            default_tls
        )

    except (EndpointConfigError, ValueError, FileNotFoundError) as e:
        logger.error(f"Invalid endpoint configuration: {str(e)}")
        return 1

    if args.output == "table":
        print(format_config_table(groups))
    else:
        print(dump_config(groups), end="")

    logger.info("Endpoint configuration is valid")
    return 0


if __name__ == "__main__":
    sys.exit(main())
