"""Configuration manager for loading and validating .cfn-cleaner.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from cfn_cleaner.domain.config import AppConfig, AwsConfig, RetryOptions, SweepConfig
from cfn_cleaner.domain.config.retry import DELETE_STACK_RETRY
from cfn_cleaner.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".cfn-cleaner.yml"


class ConfigManager:
    """Manages configuration from .cfn-cleaner.yml and environment variables

    Loads configuration with validation using Pydantic models. Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .cfn-cleaner.yml file (searched from current directory)
    3. Environment variables (CFN_CLEANER_*)
    4. CLI arguments (handled by CLI layer)
    """

    DEFAULT_CONFIG = {
        "aws": {
            "region": None,
            "profile": None,
        },
        "sweep": {
            "batch_size": 3,
            "warmup_delay": 3.0,
            "max_wait_seconds": 180,
            "max_concurrency": None,
            "failure_policy": "collect",
        },
        "retry": dict(DELETE_STACK_RETRY),
    }

    ENV_OVERRIDES = {
        "CFN_CLEANER_REGION": ("aws", "region"),
        "CFN_CLEANER_PROFILE": ("aws", "profile"),
        "CFN_CLEANER_BATCH_SIZE": ("sweep", "batch_size"),
        "CFN_CLEANER_MAX_CONCURRENCY": ("sweep", "max_concurrency"),
        "CFN_CLEANER_RETRY_STRATEGY": ("retry", "strategy"),
        "CFN_CLEANER_RETRY_MAX_ATTEMPTS": ("retry", "max_attempts"),
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .cfn-cleaner.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"  - {field}: {error['msg']}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .cfn-cleaner.yml starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and validate with Pydantic

        Raises:
            ValidationError: If configuration is invalid
            ConfigurationError: If the file cannot be parsed
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(
                    f"Failed to load config from {self.config_path}: {e}"
                ) from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(
                    f"{self.config_path} must contain a mapping at the top level"
                )
            config_dict = self._merge_config(config_dict, file_config)
            logger.info(f"Loaded configuration from {self.config_path}")

        config_dict = self._apply_env_overrides(config_dict)
        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides (values are validated by pydantic)"""
        for env_name, (section, key) in self.ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                logger.debug(f"Overriding {section}.{key} from {env_name}")
                config.setdefault(section, {})[key] = value
        return config

    def get_aws_config(self) -> AwsConfig:
        """Get AWS client configuration"""
        return self.config.aws

    def get_sweep_config(self) -> SweepConfig:
        """Get batch deletion configuration"""
        return self.config.sweep

    def get_retry_config(self) -> RetryOptions:
        """Get DeleteStack retry configuration"""
        return self.config.retry
