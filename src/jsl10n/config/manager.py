"""Configuration manager for jsl10n.

This module loads the optional YAML tool configuration and the project
manifest (package.json), validating both with the Pydantic models from
:mod:`jsl10n.config.schema`.
"""

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..utils.core.exceptions import ConfigurationError
from .schema import ExtractConfig, PackageManifest


logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Loader for the files that configure an extraction run.

    The tool configuration (YAML) controls how extraction works; the project
    manifest (JSON) lists the locales the project is translated into.
    """

    @staticmethod
    def load_config(
        config_path: Path | None = None, **overrides: object
    ) -> ExtractConfig:
        """
        Build the run configuration.

        Args:
            config_path: Optional YAML file with ExtractConfig fields
            **overrides: Values that take precedence over the file (None values are ignored)

        Returns:
            ExtractConfig: Validated configuration object

        Raises:
            FileNotFoundError: If the config file doesn't exist
            yaml.YAMLError: If the YAML syntax is invalid
            ConfigurationError: If the configuration fails validation
        """
        config_data: dict[str, object] = {}
        if config_path is not None:
            config_data = ConfigManager._read_yaml(config_path)
            if "workdir" in config_data:
                raise ConfigurationError(
                    f"'workdir' cannot be set in {config_path}; pass --workdir instead"
                )

        config_data.update(
            {key: value for key, value in overrides.items() if value is not None}
        )

        try:
            return ExtractConfig(**config_data)  # pyright: ignore[reportArgumentType]
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", context=e) from e

    @staticmethod
    def _read_yaml(config_path: Path) -> dict[str, object]:
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as f:
                raw_config_data: object = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if raw_config_data is None:
            return {}
        if not isinstance(raw_config_data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a YAML mapping, got {type(raw_config_data).__name__}"
            )
        return dict(raw_config_data)  # pyright: ignore[reportUnknownArgumentType]

    @staticmethod
    def load_manifest(manifest_path: Path) -> PackageManifest:
        """
        Load the project manifest.

        A missing manifest is not an error: the project simply has no
        locales configured.

        Args:
            manifest_path: Path to package.json

        Returns:
            PackageManifest: Parsed manifest

        Raises:
            ConfigurationError: If the file is not valid JSON or not an object
        """
        if not manifest_path.exists():
            logger.warning(f"Project manifest not found: {manifest_path}")
            return PackageManifest()

        try:
            raw_manifest: object = json.loads(manifest_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {manifest_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read {manifest_path}: {e}") from e

        if not isinstance(raw_manifest, dict):
            raise ConfigurationError(
                f"{manifest_path} must contain a JSON object, got {type(raw_manifest).__name__}"
            )

        try:
            return PackageManifest.model_validate(raw_manifest)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid manifest {manifest_path}: {e}") from e
