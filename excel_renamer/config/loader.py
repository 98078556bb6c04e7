from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..services.extractor import NAME_LIKE_TERMS

"""YAML config loader.

Responsibilities:
- Load the YAML run configuration (default: config/rename.yml)
- Validate it against the bundled JSON schema (config_schema.json)
- Apply defaults for every optional key
"""

__all__ = [
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_OUTPUT",
    "ConfigError",
    "RenameConfig",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/rename.yml")
DEFAULT_OUTPUT = "arquivos_renomeados.zip"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class RenameConfig:
    reference_file: str
    source_directory: str
    template: str
    match_column: str | None = None  # None -> suggested from the sheet header
    output: str = DEFAULT_OUTPUT
    sheet: str | None = None  # None -> first sheet
    csv_encoding: str | None = None
    recursive: bool = False
    unmatched_policy: str = "skip"  # skip | original | marked
    duplicate_keys: str = "last"  # last | first
    name_like_terms: tuple[str, ...] = NAME_LIKE_TERMS
    max_workers: int | None = None

    def with_overrides(self, **overrides: Any) -> RenameConfig:
        """Return a copy with every non-None override applied (CLI flags)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or the data violates it
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


def load_config(path: Path) -> RenameConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    terms = data.get("name_like_terms")
    return RenameConfig(
        reference_file=data["reference_file"],
        source_directory=data["source_directory"],
        template=data["template"],
        match_column=data.get("match_column"),
        output=data.get("output", DEFAULT_OUTPUT),
        sheet=data.get("sheet"),
        csv_encoding=data.get("csv_encoding"),
        recursive=bool(data.get("recursive", False)),
        unmatched_policy=data.get("unmatched_policy", "skip"),
        duplicate_keys=data.get("duplicate_keys", "last"),
        name_like_terms=tuple(terms) if terms else NAME_LIKE_TERMS,
        max_workers=data.get("max_workers"),
    )
