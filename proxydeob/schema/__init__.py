"""Declarative description of the proxy namespaces emitted by the obfuscator.

The matchers never hardcode identifier names; they consult a
:class:`ProxySchema`.  The packaged ``config.json`` ships the names observed in
the wild under the ``default`` scheme.  Alternative schemes can be loaded from
any JSON file with the same layout, either as a ``{"schemes": {...}}`` mapping
or as a single bare scheme object.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from ..exceptions import SchemaError

LOG = logging.getLogger(__name__)

_CONFIG_PATH = Path(__file__).with_name("config.json")
DEFAULT_SCHEME = "default"

_REQUIRED_NAMES = (
    "root",
    "array_namespace",
    "proxy_namespace",
    "alias_namespace",
    "config_table",
)


@dataclass(frozen=True)
class ProxySchema:
    """Names used by one obfuscator variant."""

    root: str
    array_namespace: str
    proxy_namespace: str
    alias_namespace: str
    config_table: str
    key_positions: Dict[str, int] = field(default_factory=dict)
    name: str = DEFAULT_SCHEME

    @property
    def encoded_tables(self) -> Tuple[str, ...]:
        """Identifiers of the tables that need a key from the config table."""

        return tuple(self.key_positions)

    @property
    def table_ids(self) -> Tuple[str, ...]:
        """Every identifier the extractor recognises, config table first."""

        return (self.config_table,) + self.encoded_tables


def schema_from_mapping(data: Mapping[str, Any], *, name: str = DEFAULT_SCHEME) -> ProxySchema:
    """Validate ``data`` and build a :class:`ProxySchema` from it."""

    if not isinstance(data, Mapping):
        raise SchemaError(f"scheme {name!r} must be a JSON object")

    values: Dict[str, str] = {}
    for key in _REQUIRED_NAMES:
        value = data.get(key)
        if not isinstance(value, str) or not value:
            raise SchemaError(f"scheme {name!r} is missing a name for {key!r}")
        values[key] = value

    raw_positions = data.get("key_positions")
    if not isinstance(raw_positions, Mapping) or not raw_positions:
        raise SchemaError(f"scheme {name!r} must define key_positions")

    positions: Dict[str, int] = {}
    for table_id, index in raw_positions.items():
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise SchemaError(
                f"scheme {name!r} has an invalid key position for {table_id!r}: {index!r}"
            )
        positions[str(table_id)] = index

    if values["config_table"] in positions:
        raise SchemaError(f"scheme {name!r} lists the config table as an encoded table")

    return ProxySchema(key_positions=positions, name=name, **values)


def load_schema(path: Optional[Path] = None, *, scheme: str = DEFAULT_SCHEME) -> ProxySchema:
    """Load ``scheme`` from ``path`` (the packaged config when ``None``)."""

    source = Path(path) if path is not None else _CONFIG_PATH
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SchemaError(f"cannot read schema file {source}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SchemaError(f"schema file {source} is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise SchemaError(f"schema file {source} must contain a JSON object")

    schemes = payload.get("schemes")
    if schemes is None:
        LOG.debug("schema file %s holds a single bare scheme", source)
        return schema_from_mapping(payload, name=scheme)
    if not isinstance(schemes, dict) or scheme not in schemes:
        raise SchemaError(f"schema file {source} does not define scheme {scheme!r}")
    return schema_from_mapping(schemes[scheme], name=scheme)


__all__ = ["DEFAULT_SCHEME", "ProxySchema", "load_schema", "schema_from_mapping"]
