"""Command line interface of the endpoint configuration loader."""

from .parser import QueryEndpointArguments, parse_arguments

__all__ = ['QueryEndpointArguments', 'parse_arguments']
