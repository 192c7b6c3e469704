# Copyright (c) 2025 the procauth authors.
# All rights reserved.
# Provided without warranty.


"""
Package authz implements process authorization rules: the three subject variants, their
extension-tree encoding, the runtime evaluator and the rule-set helper.

Typical use::

    helper = ProcessAuthorizationHelper()
    definition = helper.add(definition, "startPing", "http://foo/Task/ping|1.0",
                            requester.local_all(), recipient.local_all())

    for subject in helper.get_requesters(definition, url, version, "startPing", profiles):
        if is_requester_authorized(subject, identity, affiliations):
            ...
"""

from .codes import (
    PROCESS_AUTHORIZATION_SYSTEM,
    ORGANIZATION_IDENTIFIER_SYSTEM,
    EXTENSION_PROCESS_AUTHORIZATION,
    ProcessAuthorizationCode,
    process_authorization_coding,
    is_process_authorization_code,
)
from .subjects import (
    RequesterSubject,
    RecipientSubject,
    All,
    Organization,
    Role,
    Subject,
    RequesterFactory,
    RecipientFactory,
    requester,
    recipient,
)
from .codec import (
    ExistencePredicates,
    to_requester_extension,
    to_recipient_extension,
    requester_from,
    recipient_from,
    requester_matches,
    recipient_matches,
)
from .evaluator import is_requester_authorized, is_recipient_authorized
from .helper import ProcessAuthorizationHelper

__all__ = [
    # Constants
    'PROCESS_AUTHORIZATION_SYSTEM',
    'ORGANIZATION_IDENTIFIER_SYSTEM',
    'EXTENSION_PROCESS_AUTHORIZATION',
    'ProcessAuthorizationCode',
    'process_authorization_coding',
    'is_process_authorization_code',

    # Subjects
    'RequesterSubject',
    'RecipientSubject',
    'All',
    'Organization',
    'Role',
    'Subject',
    'RequesterFactory',
    'RecipientFactory',
    'requester',
    'recipient',

    # Codec
    'ExistencePredicates',
    'to_requester_extension',
    'to_recipient_extension',
    'requester_from',
    'recipient_from',
    'requester_matches',
    'recipient_matches',

    # Evaluation and rule-sets
    'is_requester_authorized',
    'is_recipient_authorized',
    'ProcessAuthorizationHelper',
]
