# Copyright (c) 2025 the procauth authors.
# All rights reserved.
# Provided without warranty.

"""
Package tree provides the immutable extension-tree model that process authorization rules are encoded in.

A rule is a tree of named nodes (extensions). Each node has a URL, an optional typed value
(string, canonical URL, Coding or Identifier) and an ordered list of child nodes.
"""

from .datatypes import (
    Canonical,
    Coding,
    Identifier,
    Extension,
    ExtensionValue,
)

__all__ = [
    'Canonical',
    'Coding',
    'Identifier',
    'Extension',
    'ExtensionValue',
]
