"""
Runtime authorization decisions for decoded subjects.

Decisions are pure predicates over the supplied values: a malformed or unexpected identity is
reported as "not authorized", never as an error.
"""

from typing import FrozenSet, Iterable, Optional
import logging

from ..identity import Identity, OrganizationAffiliation, OrganizationIdentity, PractitionerIdentity
from ..identity import Organization as IdentityOrganization
from ..tree import Coding
from .codes import ORGANIZATION_IDENTIFIER_SYSTEM
from .subjects import All, Organization, Role, Subject


logger = logging.getLogger(__name__)


def _practitioner_roles(identity: Identity) -> FrozenSet[Coding]:
    if isinstance(identity, PractitionerIdentity):
        return identity.practitioner_roles
    return frozenset()


def _practitioner_branch(subject: Subject, identity: Identity) -> bool:
    if subject.needs_practitioner_role:
        expected = subject.practitioner_role
        if isinstance(identity, PractitionerIdentity) and any(
                expected.same_as(role) for role in _practitioner_roles(identity)):
            return True
        logger.debug(f"Denied {subject.code}: practitioner role {expected.system}|{expected.code} missing")
        return False

    if isinstance(identity, OrganizationIdentity):
        return True
    logger.debug(f"Denied {subject.code}: identity is not an organization identity")
    return False


def _common_preconditions(subject: Subject, identity: Optional[Identity]) -> bool:
    if identity is None:
        logger.debug(f"Denied {subject.code}: no identity")
        return False
    if identity.organization is None or not identity.organization.active:
        logger.debug(f"Denied {subject.code}: organization missing or inactive")
        return False
    if identity.is_local_identity != subject.local_identity:
        logger.debug(f"Denied {subject.code}: locality mismatch")
        return False
    return True


def _affiliation_matches(affiliation: OrganizationAffiliation, subject: Role,
                         member: IdentityOrganization) -> bool:
    parent = affiliation.organization
    participant = affiliation.participating_organization

    return (affiliation.active
            # parent organization
            and parent is not None and parent.has_system() and parent.has_value()
            and parent.system == ORGANIZATION_IDENTIFIER_SYSTEM
            and parent.value == subject.parent_organization_identifier
            # member organization
            and participant is not None and participant.has_system() and participant.has_value()
            and member.has_identifier(participant.system, participant.value)
            # role
            and any(c.has_system() and c.has_code() and subject.organization_role.same_as(c)
                    for c in affiliation.codes))


def _has_parent_organization_member_role(subject: Role, identity: Identity,
                                         affiliations: Optional[Iterable[OrganizationAffiliation]]) -> bool:
    if affiliations is None:
        logger.debug(f"Denied {subject.code}: no affiliations supplied")
        return False

    if any(_affiliation_matches(a, subject, identity.organization) for a in affiliations):
        return True

    logger.debug(f"Denied {subject.code}: no active affiliation with parent "
                 f"{subject.parent_organization_identifier} and role "
                 f"{subject.organization_role.system}|{subject.organization_role.code}")
    return False


def _is_authorized(subject: Subject, identity: Optional[Identity],
                   affiliations: Optional[Iterable[OrganizationAffiliation]]) -> bool:
    if not _common_preconditions(subject, identity):
        return False

    if isinstance(subject, All):
        pass
    elif isinstance(subject, Organization):
        if not identity.organization.has_identifier(ORGANIZATION_IDENTIFIER_SYSTEM, subject.organization_identifier):
            logger.debug(f"Denied {subject.code}: organization identifier {subject.organization_identifier} missing")
            return False
    elif isinstance(subject, Role):
        if not _has_parent_organization_member_role(subject, identity, affiliations):
            return False
    else:
        return False

    return _practitioner_branch(subject, identity)


def is_requester_authorized(subject: Subject, identity: Optional[Identity],
                            affiliations: Optional[Iterable[OrganizationAffiliation]] = None) -> bool:
    """
    Decide whether the identity may request (send) a message under this rule.

    Args:
        subject: Decoded requester rule
        identity: Calling identity, may be None
        affiliations: Directory records of the identity's organization, only consulted for Role
            rules. Consumed at most once.

    Returns:
        bool: True if authorized
    """
    return _is_authorized(subject, identity, affiliations)


def is_recipient_authorized(subject: Subject, identity: Optional[Identity],
                            affiliations: Optional[Iterable[OrganizationAffiliation]] = None) -> bool:
    """
    Decide whether the identity may receive a message under this rule.

    Same checks as is_requester_authorized; recipients decoded from a rule-set are always local
    organizations.
    """
    return _is_authorized(subject, identity, affiliations)
