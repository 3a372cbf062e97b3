import yaml
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union
from prettytable import PrettyTable
from pydantic import ValidationError

from .errors import DecodeError, DuplicateEndpointError, ModeConflictError
from .schemas import EndpointGroup, EndpointMode, FileSDConfig, TLSConfiguration


class StrictSafeLoader(yaml.SafeLoader):
    """SafeLoader that refuses mappings with repeated keys.

    Every schema field is text, so non-null scalars such as ``yes``, ``1`` or
    ``2024-01-01`` are kept as their source text instead of being resolved to
    bool, int, float or date.
    """

    def construct_scalar_text(self, node):
        return self.construct_scalar(node)

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                key = self.construct_object(key_node, deep=deep)
                try:
                    hash(key)
                except TypeError:
                    # unhashable keys are reported by the base constructor
                    continue
                if key in seen:
                    raise yaml.constructor.ConstructorError(
                        "while constructing a mapping", node.start_mark,
                        f"found duplicate key {key!r}", key_node.start_mark
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


for _tag in ("bool", "int", "float", "timestamp"):
    StrictSafeLoader.add_constructor(f"tag:yaml.org,2002:{_tag}", StrictSafeLoader.construct_scalar_text)


class EndpointConfigLoader:
    """Merges and validates the endpoint groups of a query node"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def load_and_validate(
            self,
            document: Optional[Union[bytes, str]] = None,
            static_addrs: Sequence[str] = (),
            strict_addrs: Sequence[str] = (),
            discovery: Optional[FileSDConfig] = None,
            default_tls: Optional[TLSConfiguration] = None
    ) -> List[EndpointGroup]:
        """
        Build the full list of endpoint groups from every configuration source.

        Groups declared in the document come first, in document order, followed by
        the group built from ``static_addrs``/``discovery`` and the group built from
        ``strict_addrs``.

        Args:
            document: Raw YAML document holding a list of endpoint groups, may be empty
            static_addrs: Addresses merged as one additional default mode group
            strict_addrs: Addresses merged as one additional strict mode group
            discovery: File discovery source attached to the default mode group
            default_tls: TLS settings of both generated groups

        Returns:
            List[EndpointGroup]: Validated endpoint groups

        Raises:
            DecodeError: If the document is malformed or contains unknown fields
            InvalidModeError: If a group of the document declares an unknown mode
            ModeConflictError: If a strict group of the document declares sd-files
            DuplicateEndpointError: If an address is configured more than once
        """
        if default_tls is None:
            default_tls = TLSConfiguration()

        groups: List[EndpointGroup] = []

        if document:
            decoded = self._decode(document)

            # Checking if wrong mode is provided.
            modes = [EndpointMode.parse(raw_mode) for _, raw_mode in decoded]

            # No dynamic endpoints in strict mode.
            for (group, _), mode in zip(decoded, modes):
                if mode is EndpointMode.STRICT and group.endpoints_sd_files:
                    raise ModeConflictError(group.name)

            groups = [group.model_copy(update={"mode": mode}) for (group, _), mode in zip(decoded, modes)]
            self.logger.debug(f"Decoded {len(groups)} endpoint groups from the configuration document")

        if static_addrs or discovery is not None:
            groups.append(EndpointGroup(
                tls_config=default_tls,
                endpoints=tuple(static_addrs),
                endpoints_sd_files=(discovery,) if discovery is not None else (),
                mode=EndpointMode.DEFAULT
            ))

        if strict_addrs:
            groups.append(EndpointGroup(
                tls_config=default_tls,
                endpoints=tuple(strict_addrs),
                mode=EndpointMode.STRICT
            ))

        seen = set()
        for group in groups:
            for addr in group.endpoints:
                if addr in seen:
                    raise DuplicateEndpointError(addr)
                seen.add(addr)

        self.logger.info(f"Successfully loaded {len(groups)} endpoint groups with {len(seen)} static endpoints")
        return groups

    def _decode(self, document: Union[bytes, str]) -> List[Tuple[EndpointGroup, Any]]:
        """Decode the document into groups, keeping each group's raw mode aside.

        Modes are validated by the caller once the whole document decoded, so an
        unknown field anywhere in the document wins over a bad mode.
        """
        try:
            raw_config = yaml.load(document, Loader=StrictSafeLoader)
        except yaml.YAMLError as e:
            raise DecodeError(f"Failed to parse endpoint configuration: {e}") from e

        if raw_config is None:
            return []
        if not isinstance(raw_config, list):
            raise DecodeError(
                f"Endpoint configuration must be a list of endpoint groups, got {type(raw_config).__name__}"
            )

        decoded = []
        for index, raw_group in enumerate(raw_config):
            if not isinstance(raw_group, dict):
                raise DecodeError(f"Endpoint group #{index} must be a mapping, got {type(raw_group).__name__}")

            fields = dict(raw_group)
            raw_mode = fields.pop("mode", None)
            if raw_mode is not None and not isinstance(raw_mode, str):
                raise DecodeError(f"Endpoint group #{index} has a non-string mode: {raw_mode!r}")

            try:
                group = EndpointGroup.model_validate(fields)
            except ValidationError as e:
                raise DecodeError(f"Endpoint group #{index} does not match the schema:\n{e}") from e
            decoded.append((group, raw_mode))

        return decoded


def load_config(
        document: Optional[Union[bytes, str]] = None,
        static_addrs: Sequence[str] = (),
        strict_addrs: Sequence[str] = (),
        discovery: Optional[FileSDConfig] = None,
        default_tls: Optional[TLSConfiguration] = None
) -> List[EndpointGroup]:
    """Convenience function to load and validate the endpoint configuration."""
    config_loader = EndpointConfigLoader()
    return config_loader.load_and_validate(document, static_addrs, strict_addrs, discovery, default_tls)


def read_path_or_content(path: Optional[Union[str, Path]] = None, content: Optional[str] = None) -> Optional[bytes]:
    """
    Read a configuration given either as a file path or inline.

    Args:
        path: Path to the configuration file
        content: Configuration passed inline

    Returns:
        Optional[bytes]: The configuration, or None if neither was given

    Raises:
        ValueError: If both a path and inline content are given
        FileNotFoundError: If the configuration file doesn't exist
    """
    if path is not None and content is not None:
        raise ValueError("Both a configuration file and inline configuration were given, pass only one")

    if content is not None:
        return content.encode("utf-8")

    if path is None:
        return None

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Endpoint configuration file not found: {path}")
    return path.read_bytes()


def dump_config(groups: Iterable[EndpointGroup]) -> str:
    """Render endpoint groups as a YAML document the loader accepts back."""
    raw = [group.model_dump(mode="json", exclude_none=True) for group in groups]
    return yaml.safe_dump(raw, sort_keys=False)


def format_config_table(groups: Iterable[EndpointGroup]) -> PrettyTable:
    """
    Summarize endpoint groups for operators.

    Args:
        groups: Endpoint groups to summarize

    Returns:
        PrettyTable: One row per group
    """
    table = PrettyTable(["Name", "Mode", "TLS", "Endpoints", "SD files"])
    table.align = "l"
    for group in groups:
        sd_files = [name for sd_config in group.endpoints_sd_files for name in sd_config.files]
        table.add_row([
            group.name or "-",
            group.mode.value or "default",
            "on" if group.tls_config.enabled else "off",
            "\n".join(group.endpoints) or "-",
            "\n".join(sd_files) or "-",
        ])
    return table
