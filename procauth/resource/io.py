"""
Reading and writing process definition documents (JSON or YAML).
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from ..types.errors import ResourceFormatError
from .types import ProcessDefinition


logger = logging.getLogger(__name__)

_FORMATS = {
    '.json': 'json',
    '.yaml': 'yaml',
    '.yml': 'yaml',
}


def _format_of(file_path: str, format_type: Optional[str] = None, default_format: Optional[str] = None) -> str:
    if format_type is not None:
        format_type = format_type.lower()
        if format_type == 'yml':
            format_type = 'yaml'
        if format_type not in ('json', 'yaml'):
            raise ResourceFormatError(f"Unsupported resource format: {format_type}", source=file_path)
        return format_type

    suffix = Path(file_path).suffix.lower()
    if suffix not in _FORMATS and default_format is not None:
        return _format_of(file_path, default_format)
    if suffix not in _FORMATS:
        raise ResourceFormatError(f"Unsupported resource file format: {suffix or '<none>'}", source=file_path)
    return _FORMATS[suffix]


def load_process_definition(file_path: str) -> ProcessDefinition:
    """
    Load a process definition from a JSON or YAML file.

    Args:
        file_path: Path ending in .json, .yaml or .yml

    Returns:
        ProcessDefinition: The parsed resource

    Raises:
        FileNotFoundError: If the file does not exist
        ResourceFormatError: If the file can not be parsed into a process definition
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Resource file not found: {file_path}")

    format_type = _format_of(file_path)

    with open(file_path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f) if format_type == 'json' else yaml.safe_load(f)
        except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ResourceFormatError(f"Malformed {format_type} document: {e}", source=file_path, cause=e) from e

    try:
        definition = ProcessDefinition.from_dict(data)
    except ResourceFormatError as e:
        if e.source is None:
            e.source = file_path
            e.details['source'] = file_path
        raise

    logger.debug(f"Loaded process definition {definition.url}|{definition.version} from {file_path}")
    return definition


def dump_process_definition(definition: ProcessDefinition, file_path: str,
                            format_type: Optional[str] = None, default_format: Optional[str] = None) -> None:
    """
    Write a process definition as JSON or YAML.

    The format is format_type if given, else taken from the file extension, else default_format.
    """
    format_type = _format_of(file_path, format_type, default_format)

    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(file_path, 'w', encoding='utf-8') as f:
        if format_type == 'json':
            json.dump(definition.to_dict(), f, indent=2, separators=(',', ': '))
        else:
            yaml.safe_dump(definition.to_dict(), f, default_flow_style=False, indent=2, sort_keys=False)

    logger.debug(f"Wrote process definition {definition.url}|{definition.version} to {file_path}")
