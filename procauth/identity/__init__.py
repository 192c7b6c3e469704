# Copyright (c) 2025 the procauth authors.
# All rights reserved.
# Provided without warranty.

"""
Package identity provides the read-only caller identity and affiliation records the evaluator consumes.
"""

from .types import (
    Organization,
    Identity,
    OrganizationIdentity,
    PractitionerIdentity,
    OrganizationAffiliation,
)

__all__ = [
    'Organization',
    'Identity',
    'OrganizationIdentity',
    'PractitionerIdentity',
    'OrganizationAffiliation',
]
