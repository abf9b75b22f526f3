"""Migration configuration.

Settings can be built in Python, loaded from YAML, or both (CLI flags
override file values).

Example YAML (products.yaml):
    migration:
      base_url: http://solr.internal:8983/solr/products
      source_field: category
      target_field: categories
      page_size: 50
      update_batch_size: 25
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from backfill.lib.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_BASE_URL",
    "MigrationConfig",
    "load_config",
    "config_from_dict",
]

DEFAULT_BASE_URL = "http://localhost:8983/solr/collection1"


@dataclass
class MigrationConfig:
    """Settings for one field migration run."""

    base_url: str = DEFAULT_BASE_URL
    source_field: str = "category"
    target_field: str = "categories"
    page_size: int = 20
    update_batch_size: int = 10
    unique_key: str = "id"
    timeout: float = 30.0

    def __post_init__(self) -> None:
        errors = self._validate()
        if errors:
            error_msg = "\n".join(f"  - {e}" for e in errors)
            raise ConfigurationError(
                f"Migration configuration errors:\n{error_msg}",
                suggestion="Fix the configuration and try again.",
            )

    def _validate(self) -> List[str]:
        errors: List[str] = []

        if not self.base_url:
            errors.append("base_url is required (e.g., 'http://localhost:8983/solr/products')")
        elif not self.base_url.startswith(("http://", "https://")):
            errors.append(f"base_url must be an http(s) URL, got '{self.base_url}'")

        for name in ("source_field", "target_field", "unique_key"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                errors.append(f"{name} must be a non-empty field name")

        if self.source_field and self.source_field == self.target_field:
            errors.append("source_field and target_field must differ")
        if self.target_field and self.target_field == self.unique_key:
            errors.append("target_field must not be the unique_key")

        for name in ("page_size", "update_batch_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                errors.append(f"{name} must be a positive integer, got {value!r}")

        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            errors.append(f"timeout must be a positive number, got {self.timeout!r}")

        return errors

    def with_overrides(self, **overrides: Any) -> "MigrationConfig":
        """Return a copy with the non-None overrides applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return config_from_dict(values)


def config_from_dict(options: Dict[str, Any]) -> MigrationConfig:
    """Build a MigrationConfig from a mapping, rejecting unknown keys."""
    known = {f.name for f in fields(MigrationConfig)}
    unknown = sorted(set(options) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(unknown)}",
            field=unknown[0],
            suggestion=f"Valid keys are: {', '.join(sorted(known))}",
        )
    return MigrationConfig(**options)


def load_config(path: Union[str, Path]) -> MigrationConfig:
    """Load a MigrationConfig from a YAML file.

    The file holds either the settings at the top level or under a
    ``migration:`` key.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}", field="config")

    try:
        with path.open(encoding="utf-8") as f:
            data: Optional[Any] = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Invalid YAML in {path}: {exc}",
            field="config",
        ) from exc

    if data is None:
        data = {}
    if isinstance(data, dict) and "migration" in data:
        data = data["migration"]
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping of settings",
            field="config",
        )

    logger.debug("Loaded configuration from %s", path)
    return config_from_dict(data)
