"""
procauth Python Package

Process authorization rules for inter-organizational process message exchange:
rule variants, their extension-tree encoding, evaluation and rule-set validation.
"""

__version__ = "0.1.0"

from .core.config import Config
# authz before resource, resource.types reads authz.codes
from .authz import (
    All,
    Organization,
    Role,
    ExistencePredicates,
    ProcessAuthorizationHelper,
    is_requester_authorized,
    is_recipient_authorized,
    requester,
    recipient,
)
from .resource import ProcessDefinition, load_process_definition, dump_process_definition
from .types import ProcessAuthError, InvalidArgumentError, ResourceFormatError

__all__ = [
    "Config",
    "All",
    "Organization",
    "Role",
    "ExistencePredicates",
    "ProcessAuthorizationHelper",
    "is_requester_authorized",
    "is_recipient_authorized",
    "requester",
    "recipient",
    "ProcessDefinition",
    "load_process_definition",
    "dump_process_definition",
    "ProcessAuthError",
    "InvalidArgumentError",
    "ResourceFormatError",
]
