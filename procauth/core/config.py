"""
Configuration module for procauth.

Copyright (c) 2025 the procauth authors.
All rights reserved.
Provided without warranty.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict
import logging

import yaml

from ..types.errors import ConfigurationError
from ..util.config import (
    get_bool_config, load_config_file, load_config_from_env, merge_configs, save_config_file
)


LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
RESOURCE_FORMATS = ('json', 'yaml')


@dataclass
class Config:
    """Configuration for the process authorization library and CLI"""
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    warn_on_profile_fallback: bool = True
    default_resource_format: str = "json"

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from PROCAUTH_* environment variables"""
        defaults = cls()
        env = load_config_from_env()
        return cls(
            log_level=env.get("log_level", defaults.log_level).upper(),
            log_format=env.get("log_format", defaults.log_format),
            warn_on_profile_fallback=get_bool_config("warn_on_profile_fallback",
                                                     defaults.warn_on_profile_fallback),
            default_resource_format=env.get("default_resource_format",
                                            defaults.default_resource_format).lower(),
        )

    @classmethod
    def from_file(cls, file_path: str) -> "Config":
        """Create configuration from a JSON or YAML file; unknown keys are rejected"""
        try:
            data = load_config_file(file_path)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(str(e), config_key='file', config_value=file_path) from e

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration file must contain a mapping",
                                     config_key='file', config_value=file_path)

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}",
                                     config_key=unknown[0])

        return cls(**merge_configs(asdict(cls()), data))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, file_path: str) -> None:
        save_config_file(self.to_dict(), file_path)

    @property
    def log_level_value(self) -> int:
        """Numeric logging level"""
        return getattr(logging, self.log_level.upper())

    def validate(self) -> bool:
        """Validate the configuration"""
        if not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {', '.join(LOG_LEVELS)}",
                                     config_key='log_level', config_value=self.log_level)
        if not self.log_format:
            raise ConfigurationError("log_format is required", config_key='log_format')
        if not isinstance(self.warn_on_profile_fallback, bool):
            raise ConfigurationError("warn_on_profile_fallback must be a boolean",
                                     config_key='warn_on_profile_fallback',
                                     config_value=self.warn_on_profile_fallback)
        if self.default_resource_format not in RESOURCE_FORMATS:
            raise ConfigurationError(f"default_resource_format must be one of {', '.join(RESOURCE_FORMATS)}",
                                     config_key='default_resource_format',
                                     config_value=self.default_resource_format)
        return True
