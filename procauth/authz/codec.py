"""
Encoding of authorization subjects into extension trees and decoding them back.

Decoding never raises. Unknown codes, missing or duplicated sub-nodes, wrongly typed values
and references rejected by an existence predicate all decode to None.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

from ..tree import Canonical, Coding, Extension, Identifier
from ..util.validation import is_blank
from ..types.errors import InvalidArgumentError
from .codes import (
    ORGANIZATION_IDENTIFIER_SYSTEM,
    EXTENSION_PROCESS_AUTHORIZATION_REQUESTER,
    EXTENSION_PROCESS_AUTHORIZATION_RECIPIENT,
    EXTENSION_PROCESS_AUTHORIZATION_PRACTITIONER,
    EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION,
    EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER,
    EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER_ORGANIZATION,
    EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER_PRACTITIONER_ROLE,
    EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE,
    EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PARENT_ORGANIZATION,
    EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_ORGANIZATION_ROLE,
    EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PRACTITIONER,
    EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PRACTITIONER_PRACTITIONER_ROLE,
    ProcessAuthorizationCode,
)
from .subjects import All, Organization, Role, Subject


logger = logging.getLogger(__name__)

Codes = ProcessAuthorizationCode


def _always_true(_value) -> bool:
    return True


@dataclass(frozen=True)
class ExistencePredicates:
    """
    Caller supplied existence checks for everything a rule references.

    At authoring time these look into the resource store; at query time rules were already
    validated when written, so ``allow_all()`` is used.
    """
    profile_exists: Callable[[Canonical], bool] = _always_true
    practitioner_role_exists: Callable[[Coding], bool] = _always_true
    organization_with_identifier_exists: Callable[[Identifier], bool] = _always_true
    organization_role_exists: Callable[[Coding], bool] = _always_true

    @classmethod
    def allow_all(cls) -> 'ExistencePredicates':
        return cls()


# -- encode -------------------------------------------------------------------------------------

def _organization_identifier(value: str) -> Identifier:
    return Identifier(system=ORGANIZATION_IDENTIFIER_SYSTEM, value=value)


def _to_coding(subject: Subject) -> Coding:
    coding = subject.classification_code()

    if isinstance(subject, All):
        if subject.needs_practitioner_role:
            return coding.with_extension(
                Extension(EXTENSION_PROCESS_AUTHORIZATION_PRACTITIONER, subject.practitioner_role))
        return coding

    if isinstance(subject, Organization):
        organization = _organization_identifier(subject.organization_identifier)
        if subject.needs_practitioner_role:
            return coding.with_extension(Extension(
                EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER,
                extension=(
                    Extension(EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER_ORGANIZATION, organization),
                    Extension(EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER_PRACTITIONER_ROLE,
                              subject.practitioner_role),
                )))
        return coding.with_extension(Extension(EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION, organization))

    if isinstance(subject, Role):
        parent_organization = Extension(EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PARENT_ORGANIZATION,
                                        _organization_identifier(subject.parent_organization_identifier))
        organization_role = Extension(EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_ORGANIZATION_ROLE,
                                      subject.organization_role)
        if subject.needs_practitioner_role:
            return coding.with_extension(Extension(
                EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PRACTITIONER,
                extension=(
                    parent_organization,
                    organization_role,
                    Extension(EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PRACTITIONER_PRACTITIONER_ROLE,
                              subject.practitioner_role),
                )))
        return coding.with_extension(Extension(EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE,
                                               extension=(parent_organization, organization_role)))

    raise InvalidArgumentError(f"Unsupported subject type {type(subject).__name__}", field='subject')


def to_requester_extension(subject: Subject) -> Extension:
    """Encode a subject as ``requester`` node."""
    return Extension(EXTENSION_PROCESS_AUTHORIZATION_REQUESTER, _to_coding(subject))


def to_recipient_extension(subject: Subject) -> Extension:
    """Encode a subject as ``recipient`` node; remote or practitioner refined subjects are rejected."""
    if not subject.recipient_capable:
        raise InvalidArgumentError(f"{subject.code.value} can not be used as recipient", field='recipient')
    return Extension(EXTENSION_PROCESS_AUTHORIZATION_RECIPIENT, _to_coding(subject))


# -- decode -------------------------------------------------------------------------------------

def _single(extensions: List[Extension], url: str) -> Optional[Extension]:
    """The only child with the given url, None if there is none or more than one."""
    found = [e for e in extensions if e.has_url() and e.url == url]
    return found[0] if len(found) == 1 else None


def _organization_identifier_of(extension: Optional[Extension]) -> Optional[Identifier]:
    identifier = extension.identifier_value() if extension is not None else None
    if identifier is None or identifier.system != ORGANIZATION_IDENTIFIER_SYSTEM or is_blank(identifier.value):
        return None
    return identifier


def _coding_of(extension: Optional[Extension]) -> Optional[Coding]:
    coding = extension.coding_value() if extension is not None else None
    if coding is None or is_blank(coding.system) or is_blank(coding.code):
        return None
    return coding


def _all_practitioner_from(coding: Coding, predicates: ExistencePredicates) -> Optional[All]:
    practitioner_role = _coding_of(_single(list(coding.extension), EXTENSION_PROCESS_AUTHORIZATION_PRACTITIONER))
    if practitioner_role is not None and predicates.practitioner_role_exists(practitioner_role):
        return All(True, practitioner_role)
    return None


def _organization_from(local_identity: bool, coding: Coding,
                       predicates: ExistencePredicates) -> Optional[Organization]:
    identifier = _organization_identifier_of(
        _single(list(coding.extension), EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION))
    if identifier is not None and predicates.organization_with_identifier_exists(identifier):
        return Organization(local_identity, identifier.value)
    return None


def _organization_practitioner_from(coding: Coding, predicates: ExistencePredicates) -> Optional[Organization]:
    container = _single(list(coding.extension), EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER)
    if container is None:
        return None

    children = list(container.extension)
    identifier = _organization_identifier_of(
        _single(children, EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER_ORGANIZATION))
    practitioner_role = _coding_of(
        _single(children, EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER_PRACTITIONER_ROLE))

    if (identifier is not None and practitioner_role is not None
            and predicates.organization_with_identifier_exists(identifier)
            and predicates.practitioner_role_exists(practitioner_role)):
        return Organization(True, identifier.value, practitioner_role)
    return None


def _role_from(local_identity: bool, coding: Coding, predicates: ExistencePredicates) -> Optional[Role]:
    container = _single(list(coding.extension), EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE)
    if container is None:
        return None

    children = list(container.extension)
    parent = _organization_identifier_of(
        _single(children, EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PARENT_ORGANIZATION))
    organization_role = _coding_of(
        _single(children, EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_ORGANIZATION_ROLE))

    if (parent is not None and organization_role is not None
            and predicates.organization_with_identifier_exists(parent)
            and predicates.organization_role_exists(organization_role)):
        return Role(local_identity, parent.value, organization_role)
    return None


def _role_practitioner_from(coding: Coding, predicates: ExistencePredicates) -> Optional[Role]:
    container = _single(list(coding.extension), EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PRACTITIONER)
    if container is None:
        return None

    children = list(container.extension)
    parent = _organization_identifier_of(
        _single(children, EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PARENT_ORGANIZATION))
    organization_role = _coding_of(
        _single(children, EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_ORGANIZATION_ROLE))
    practitioner_role = _coding_of(
        _single(children, EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PRACTITIONER_PRACTITIONER_ROLE))

    if (parent is not None and organization_role is not None and practitioner_role is not None
            and predicates.organization_with_identifier_exists(parent)
            and predicates.organization_role_exists(organization_role)
            and predicates.practitioner_role_exists(practitioner_role)):
        return Role(True, parent.value, organization_role, practitioner_role)
    return None


def requester_from(coding: Optional[Coding], predicates: Optional[ExistencePredicates] = None) -> Optional[Subject]:
    """Decode the classification coding of a ``requester`` node."""
    predicates = predicates or ExistencePredicates.allow_all()
    code = Codes.of(coding)

    if code == Codes.LOCAL_ALL:
        result = All(True)
    elif code == Codes.REMOTE_ALL:
        result = All(False)
    elif code == Codes.LOCAL_ALL_PRACTITIONER:
        result = _all_practitioner_from(coding, predicates)
    elif code == Codes.LOCAL_ORGANIZATION:
        result = _organization_from(True, coding, predicates)
    elif code == Codes.REMOTE_ORGANIZATION:
        result = _organization_from(False, coding, predicates)
    elif code == Codes.LOCAL_ORGANIZATION_PRACTITIONER:
        result = _organization_practitioner_from(coding, predicates)
    elif code == Codes.LOCAL_ROLE:
        result = _role_from(True, coding, predicates)
    elif code == Codes.REMOTE_ROLE:
        result = _role_from(False, coding, predicates)
    elif code == Codes.LOCAL_ROLE_PRACTITIONER:
        result = _role_practitioner_from(coding, predicates)
    else:
        result = None

    if result is None:
        logger.debug(f"Requester with code {coding.code if coding else None} not decodable")
    return result


def recipient_from(coding: Optional[Coding], predicates: Optional[ExistencePredicates] = None) -> Optional[Subject]:
    """Decode the classification coding of a ``recipient`` node; only local, non practitioner codes are valid."""
    predicates = predicates or ExistencePredicates.allow_all()
    code = Codes.of(coding)

    if code == Codes.LOCAL_ALL:
        result = All(True)
    elif code == Codes.LOCAL_ORGANIZATION:
        result = _organization_from(True, coding, predicates)
    elif code == Codes.LOCAL_ROLE:
        result = _role_from(True, coding, predicates)
    else:
        # remote and practitioner codes are not allowed for recipients
        result = None

    if result is None:
        logger.debug(f"Recipient with code {coding.code if coding else None} not decodable")
    return result


# -- tree shape matching ------------------------------------------------------------------------

def _identifier_matches(extension: Extension, url: str, expected: str) -> bool:
    identifier = extension.identifier_value()
    return (extension.url == url and identifier is not None
            and identifier.has_system() and identifier.has_value()
            and identifier.system == ORGANIZATION_IDENTIFIER_SYSTEM and identifier.value == expected)


def _coding_matches(extension: Extension, url: str, expected: Coding) -> bool:
    coding = extension.coding_value()
    return (extension.url == url and coding is not None
            and coding.has_system() and coding.has_code() and expected.same_as(coding))


def _all_children_match(subject: All, children: List[Extension], practitioner: bool) -> bool:
    def practitioner_matches(e: Extension) -> bool:
        return (subject.needs_practitioner_role
                and _coding_matches(e, EXTENSION_PROCESS_AUTHORIZATION_PRACTITIONER, subject.practitioner_role))

    if practitioner:
        return any(practitioner_matches(e) for e in children)
    return not any(e.url == EXTENSION_PROCESS_AUTHORIZATION_PRACTITIONER for e in children)


def _organization_children_match(subject: Organization, children: List[Extension], practitioner: bool) -> bool:
    if practitioner:
        return any(
            e.url == EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER and not e.has_value()
            and any(_identifier_matches(c, EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER_ORGANIZATION,
                                        subject.organization_identifier) for c in e.extension)
            and any(_coding_matches(c, EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER_PRACTITIONER_ROLE,
                                    subject.practitioner_role) for c in e.extension)
            for e in children)

    return any(_identifier_matches(e, EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION, subject.organization_identifier)
               for e in children)


def _role_children_match(subject: Role, children: List[Extension], practitioner: bool) -> bool:
    def parent_and_role_match(container: Extension) -> bool:
        return (container.has_extension()
                and any(_identifier_matches(c, EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PARENT_ORGANIZATION,
                                            subject.parent_organization_identifier) for c in container.extension)
                and any(_coding_matches(c, EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_ORGANIZATION_ROLE,
                                        subject.organization_role) for c in container.extension))

    if practitioner:
        return any(
            e.url == EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PRACTITIONER
            and parent_and_role_match(e)
            and any(_coding_matches(
                c, EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PRACTITIONER_PRACTITIONER_ROLE,
                subject.practitioner_role) for c in e.extension)
            for e in children)

    return any(e.url == EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE and parent_and_role_match(e)
               for e in children)


def _matches(subject: Subject, extension: Optional[Extension], url: str, practitioner: bool) -> bool:
    if extension is None or extension.url != url:
        return False

    coding = extension.coding_value()
    if coding is None or not subject.matches_classification(coding):
        return False

    children = list(coding.extension)
    if isinstance(subject, All):
        return _all_children_match(subject, children, practitioner)
    elif isinstance(subject, Organization):
        return _organization_children_match(subject, children, practitioner)
    elif isinstance(subject, Role):
        return _role_children_match(subject, children, practitioner)
    return False


def requester_matches(subject: Subject, extension: Optional[Extension]) -> bool:
    """True if the ``requester`` node already encodes this subject (existence predicates not consulted)."""
    return _matches(subject, extension, EXTENSION_PROCESS_AUTHORIZATION_REQUESTER, subject.needs_practitioner_role)


def recipient_matches(subject: Subject, extension: Optional[Extension]) -> bool:
    """True if the ``recipient`` node already encodes this subject (existence predicates not consulted)."""
    return subject.recipient_capable and _matches(subject, extension, EXTENSION_PROCESS_AUTHORIZATION_RECIPIENT, False)
