"""
Configuration management for code generation.

Handles loading and merging configuration from JSON or YAML files,
providing defaults and validation for generator settings.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ...logging_config import get_logger

logger = get_logger(__name__)

ENCODINGS = ("bincode", "canonical")


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


@dataclass
class GeneratorConfig:
    """Base configuration for code generators."""

    # Output settings
    module_name: str = "generated"

    # Binary format variant: "bincode" (fixed-width) or "canonical"
    encoding: str = "bincode"

    # Type names whose references are always heap-indirected
    force_indirect: List[str] = field(default_factory=list)

    # Where generated code finds its runtime support library
    runtime_module: str = "serde_runtime"

    # Code style settings
    indent_size: int = 4
    add_comments: bool = True

    # Custom settings (language-specific)
    custom: Dict[str, Any] = field(default_factory=dict)


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configurations for supported languages."""
        self._configs["python"] = {
            "module_name": "generated",
            "runtime_module": "serde_runtime",
            "indent_size": 4,
        }

        self._configs["cpp"] = {
            "module_name": "generated",
            "runtime_module": "serde_runtime.hpp",
            "indent_size": 4,
        }

        self._configs["rust"] = {
            "module_name": "generated",
            "runtime_module": "crate::serde_runtime",
            "indent_size": 4,
        }

    def get_config(
        self,
        language: Optional[str] = None,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration for a language.

        Args:
            language: Target language name (None for language-neutral defaults)
            custom_config: Custom configuration overrides
            config_file: Path to JSON or YAML configuration file

        Returns:
            Merged configuration for the language
        """
        # Start with defaults
        base_config = dict(self._configs.get((language or "").lower(), {}))

        # Load from file if provided
        if config_file:
            file_config = self._load_config_file(config_file)
            base_config.update(file_config)

        # Apply custom overrides
        if custom_config:
            base_config.update(custom_config)

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from a JSON or YAML file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()
        if suffix not in (".json", ".yaml", ".yml"):
            raise ConfigError(f"Configuration file must be JSON or YAML: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if suffix == ".json":
                    config = json.load(f)
                else:
                    config = yaml.safe_load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a mapping: {path}")

        logger.debug("Loaded configuration file %s", path)
        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in fields(GeneratorConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Add unknown keys to the custom dict
        if custom_args:
            existing_custom = dict(config_args.get("custom") or {})
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        if "force_indirect" in config_args:
            force_indirect = config_args["force_indirect"]
            if isinstance(force_indirect, str):
                force_indirect = [force_indirect]
            config_args["force_indirect"] = list(force_indirect or [])

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to a JSON or YAML file (chosen by extension)."""
        path = Path(output_path)

        config_dict = {
            "module_name": config.module_name,
            "encoding": config.encoding,
            "force_indirect": list(config.force_indirect),
            "runtime_module": config.runtime_module,
            "indent_size": config.indent_size,
            "add_comments": config.add_comments,
        }

        # Add custom settings
        config_dict.update(config.custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                if path.suffix.lower() in (".yaml", ".yml"):
                    yaml.safe_dump(config_dict, f, sort_keys=False)
                else:
                    json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e

    def list_languages(self) -> list[str]:
        """Get list of languages with default configurations."""
        return list(self._configs.keys())

    def validate_config(self, config: GeneratorConfig, language: str) -> list[str]:
        """
        Validate configuration for a language.

        Returns:
            List of validation warnings/errors
        """
        warnings = []

        if config.encoding not in ENCODINGS:
            warnings.append(f"Invalid encoding: {config.encoding}")

        if config.indent_size < 1:
            warnings.append(f"Invalid indent_size: {config.indent_size}")

        for name in config.force_indirect:
            if not isinstance(name, str) or not name:
                warnings.append(f"Invalid force_indirect entry: {name!r}")

        # Language-specific validations
        language = language.lower()
        if language == "python":
            if not all(part.isidentifier() for part in config.module_name.split(".")):
                warnings.append(f"Invalid Python module name: {config.module_name}")
            if not all(part.isidentifier() for part in config.runtime_module.split(".")):
                warnings.append(f"Invalid Python runtime module: {config.runtime_module}")

        elif language == "cpp":
            if not all(part.isidentifier() for part in config.module_name.split("::")):
                warnings.append(f"Invalid C++ namespace: {config.module_name}")

        elif language == "rust":
            if not config.module_name.isidentifier():
                warnings.append(f"Invalid Rust module name: {config.module_name}")

        return warnings


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    language: Optional[str] = None,
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        language: Target language name
        custom_config: Custom configuration overrides
        config_file: Path to JSON or YAML configuration file

    Returns:
        Merged configuration for the language
    """
    manager = get_config_manager()
    return manager.get_config(language, custom_config, config_file)

