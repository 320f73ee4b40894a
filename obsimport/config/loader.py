from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import SchemaError, ValidationError

from ..models.config_models import (
    AppConfig,
    ColumnSchemaRegistry,
    DocumentStyleConfig,
    HeaderStyle,
    ImportSettings,
)
from ..validation.record_validator import ObservationValidator

"""Config loader.

Responsibilities:
- Load the YAML config (default config/import.yml)
- Validate it against the bundled JSON Schema (config_schema.json)
- Check every per-type record_schema is itself a valid JSON Schema
- Apply defaults (document_style / import sections are optional)
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "build_config",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the config data
            fails validation (missing keys, wrong types, unknown keys)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def build_config(data: dict[str, Any]) -> AppConfig:
    """Build AppConfig from already-parsed config data."""
    _validate_config_schema(data)

    types_raw: dict[str, Any] = data["record_types"]
    record_schemas: dict[str, dict[str, Any]] = {}
    for name, entry in types_raw.items():
        schema = entry.get("record_schema")
        if schema is None:
            continue
        try:
            ObservationValidator.check_schema(schema)
        except SchemaError as e:
            raise ConfigError(f"invalid record_schema for '{name}': {e.message}") from e
        record_schemas[name] = schema
    registry = ColumnSchemaRegistry({name: entry["columns"] for name, entry in types_raw.items()})

    style_raw = dict(data.get("document_style") or {})
    header = HeaderStyle(**(style_raw.pop("header", None) or {}))
    style = DocumentStyleConfig(header=header, **style_raw)

    settings = ImportSettings(**(data.get("import") or {}))
    return AppConfig(registry=registry, record_schemas=record_schemas, style=style, settings=settings)


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config validation failed: top level must be a mapping, got {type(data).__name__}")
    return build_config(data)
