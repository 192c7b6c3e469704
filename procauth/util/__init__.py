# Copyright (c) 2025 the procauth authors.
# All rights reserved.
# Provided without warranty.

"""
Utility package providing common helper functions for procauth.

This package includes:
- Validation utilities for required and non-blank arguments
- Configuration management utilities for environment variables and JSON/YAML files
"""

from .validation import is_blank, require_not_none, require_non_blank, require_non_empty
from .config import (
    load_config_from_env, get_config_value, get_bool_config,
    merge_configs, load_config_file, save_config_file
)

__all__ = [
    # Validation utilities
    'is_blank', 'require_not_none', 'require_non_blank', 'require_non_empty',

    # Configuration utilities
    'load_config_from_env', 'get_config_value', 'get_bool_config',
    'merge_configs', 'load_config_file', 'save_config_file',
]
