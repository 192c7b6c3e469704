# Copyright (c) 2025 the procauth authors.
# All rights reserved.
# Provided without warranty.


"""
Package resource provides the process definition resource that carries authorization rules,
and reading/writing it as JSON or YAML documents.
"""

from .types import ProcessDefinition, RESOURCE_TYPE
from .io import load_process_definition, dump_process_definition

__all__ = [
    'ProcessDefinition',
    'RESOURCE_TYPE',
    'load_process_definition',
    'dump_process_definition',
]
