"""
Formatter configuration.

FormatConfig is the validated option set consumed by the formatter.
ConfigLoader builds one from a ``mermaid_fmt.json`` file in the project
root, MERMAID_FMT_* environment variables and explicit overrides.

Priority: overrides > environment > config file > defaults
"""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "mermaid_fmt.json"


class IndentUnit(str, Enum):
    """Character emitted per indentation level"""
    SPACES = "spaces"
    TABS = "tabs"


class FormatConfig(BaseModel):
    """Formatting options. Only affects the text emitted per depth level."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    indent_unit: IndentUnit = Field(IndentUnit.SPACES, description="spaces or tabs")
    indent_width: int = Field(4, gt=0, description="Spaces per level in spaces mode")
    normalize_messages: bool = Field(
        False, description="Decode and respace sequence-diagram messages"
    )
    preserve_indent_sensitive: bool = Field(
        True, description="Pass mindmap and timeline sources through untouched"
    )

    @property
    def use_tabs(self) -> bool:
        return self.indent_unit == IndentUnit.TABS

    def indent(self, depth: int) -> str:
        """Indentation string for a depth level."""
        if depth <= 0:
            return ""
        if self.use_tabs:
            return "\t" * depth
        return " " * (depth * self.indent_width)


class ConfigLoader:
    """
    Loads FormatConfig values from file and environment.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a loader.
    ::: This is stateful.
    """

    # Mapping of config file keys to environment variable names
    CONFIG_KEY_TO_ENV = {
        "indent_unit": "MERMAID_FMT_INDENT_UNIT",
        "indent_width": "MERMAID_FMT_INDENT_WIDTH",
        "normalize_messages": "MERMAID_FMT_NORMALIZE_MESSAGES",
        "preserve_indent_sensitive": "MERMAID_FMT_PRESERVE_INDENT_SENSITIVE",
    }

    DEFAULTS: Dict[str, Any] = {
        name: model_field.default
        for name, model_field in FormatConfig.model_fields.items()
    }

    def __init__(self):
        self._config: Dict[str, Any] = {}
        self._config_path: Optional[Path] = None

    def load_file(self, path: Path, required: bool = False) -> bool:
        """
        Read a JSON config file.

        Args:
            path: File to read
            required: Raise ConfigError instead of warning when the file is
                missing or unreadable

        Returns:
            True if the file was found and loaded
        """
        if not path.exists():
            if required:
                raise ConfigError(f"Config file not found: {path}")
            return False

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            if required:
                raise ConfigError(f"Invalid JSON in {path}: {e}") from e
            logger.warning("Invalid JSON in %s: %s", path, e)
            return False

        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a JSON object, got {type(data).__name__}")

        unknown = sorted(set(data) - set(self.DEFAULTS))
        if unknown:
            logger.warning("Ignoring unknown keys in %s: %s", path, ", ".join(unknown))

        self._config = {k: v for k, v in data.items() if k in self.DEFAULTS}
        self._config_path = path
        logger.debug("Loaded config from %s", path)
        return True

    def _from_env(self, key: str) -> Optional[Any]:
        env_var = self.CONFIG_KEY_TO_ENV[key]
        env_value = os.getenv(env_var)
        if env_value is None or env_value == "":
            return None

        default_value = self.DEFAULTS[key]
        if isinstance(default_value, bool):
            return env_value.lower() in ('true', '1', 'yes')
        if isinstance(default_value, int):
            try:
                return int(env_value)
            except ValueError:
                logger.warning("Ignoring %s=%r: not an integer", env_var, env_value)
                return None
        return env_value

    def build(self, **overrides: Any) -> FormatConfig:
        """
        Merge all sources into a validated FormatConfig.

        Overrides whose value is None are ignored so CLI flags that were not
        given do not mask lower-priority sources.
        """
        values: Dict[str, Any] = {}
        for key in self.DEFAULTS:
            if overrides.get(key) is not None:
                values[key] = overrides[key]
                continue
            env_value = self._from_env(key)
            if env_value is not None:
                values[key] = env_value
            elif key in self._config:
                values[key] = self._config[key]

        try:
            return FormatConfig(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @property
    def config_path(self) -> Optional[Path]:
        """Path to the loaded config file, or None if not loaded."""
        return self._config_path


def load_config(
    project_root: Optional[Path] = None,
    path: Optional[Path] = None,
    **overrides: Any,
) -> FormatConfig:
    """
    Build a FormatConfig from the project config file, environment and overrides.

    Args:
        project_root: Directory searched for mermaid_fmt.json. Defaults to CWD.
        path: Explicit config file; must exist when given.
        **overrides: Field values taking precedence over everything else.

    Returns:
        Validated FormatConfig
    """
    loader = ConfigLoader()
    if path is not None:
        loader.load_file(Path(path), required=True)
    else:
        root = Path(project_root) if project_root is not None else Path.cwd()
        loader.load_file(root / CONFIG_FILENAME)
    return loader.build(**overrides)
