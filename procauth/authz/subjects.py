"""
Authorization subjects: who may send (requester) or receive (recipient) a process message.

There are exactly three variants, all immutable:

- ``All``: every organization (or practitioner) with the right locality
- ``Organization``: one organization, identified by its organization identifier
- ``Role``: every member organization holding a role within a parent organization

Each may be refined by a practitioner role, which turns the classification code into its
``*_PRACTITIONER`` form. Only local identities can be refined this way.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Optional, Union

from ..tree import Coding
from ..util.validation import require_non_blank, require_not_none
from ..types.errors import InvalidArgumentError
from .codes import ProcessAuthorizationCode, is_process_authorization_code, process_authorization_coding


class RequesterSubject(ABC):
    """Marker for subjects usable as message requester."""


class RecipientSubject(ABC):
    """Marker for subjects usable as message recipient."""


def _normalize_practitioner_role(local_identity: bool, practitioner_role: Optional[Coding]) -> Optional[Coding]:
    if practitioner_role is None:
        return None
    if not local_identity:
        raise InvalidArgumentError("practitioner role not allowed for remote identities",
                                   field='practitioner_role', value=practitioner_role.code)
    require_non_blank(practitioner_role.system, 'practitioner_role.system')
    require_non_blank(practitioner_role.code, 'practitioner_role.code')
    return Coding(system=practitioner_role.system, code=practitioner_role.code)


class _SubjectBase(RequesterSubject, RecipientSubject):
    """Shared classification behaviour; concrete variants define ``_codes``."""

    local_identity: bool
    practitioner_role: Optional[Coding]

    # (local, local practitioner, remote)
    _codes = ()

    @property
    def needs_practitioner_role(self) -> bool:
        return self.practitioner_role is not None

    @property
    def code(self) -> ProcessAuthorizationCode:
        local, local_practitioner, remote = self._codes
        if not self.local_identity:
            return remote
        return local_practitioner if self.needs_practitioner_role else local

    @property
    def recipient_capable(self) -> bool:
        """Recipients are always local and never practitioner refined."""
        return self.local_identity and not self.needs_practitioner_role

    def classification_code(self) -> Coding:
        """The classification coding of this subject, without child extensions."""
        return process_authorization_coding(self.code)

    def matches_classification(self, coding: Optional[Coding]) -> bool:
        """Exact system and code match against this subject's classification."""
        return is_process_authorization_code(coding, self.code)


@dataclass(frozen=True)
class All(_SubjectBase):
    """Any active organization (or practitioner of one) with matching locality."""
    local_identity: bool
    practitioner_role: Optional[Coding] = None

    _codes = (ProcessAuthorizationCode.LOCAL_ALL,
              ProcessAuthorizationCode.LOCAL_ALL_PRACTITIONER,
              ProcessAuthorizationCode.REMOTE_ALL)

    def __post_init__(self):
        object.__setattr__(self, 'practitioner_role',
                           _normalize_practitioner_role(self.local_identity, self.practitioner_role))


@dataclass(frozen=True)
class Organization(_SubjectBase):
    """A single organization, identified by a value of the organization identifier system."""
    local_identity: bool
    organization_identifier: str
    practitioner_role: Optional[Coding] = None

    _codes = (ProcessAuthorizationCode.LOCAL_ORGANIZATION,
              ProcessAuthorizationCode.LOCAL_ORGANIZATION_PRACTITIONER,
              ProcessAuthorizationCode.REMOTE_ORGANIZATION)

    def __post_init__(self):
        require_non_blank(self.organization_identifier, 'organization_identifier')
        object.__setattr__(self, 'practitioner_role',
                           _normalize_practitioner_role(self.local_identity, self.practitioner_role))


@dataclass(frozen=True)
class Role(_SubjectBase):
    """Members of a parent organization that hold a given organization role."""
    local_identity: bool
    parent_organization_identifier: str
    organization_role: Coding
    practitioner_role: Optional[Coding] = None

    _codes = (ProcessAuthorizationCode.LOCAL_ROLE,
              ProcessAuthorizationCode.LOCAL_ROLE_PRACTITIONER,
              ProcessAuthorizationCode.REMOTE_ROLE)

    def __post_init__(self):
        require_non_blank(self.parent_organization_identifier, 'parent_organization_identifier')
        require_not_none(self.organization_role, 'organization_role')
        require_non_blank(self.organization_role.system, 'organization_role.system')
        require_non_blank(self.organization_role.code, 'organization_role.code')
        object.__setattr__(self, 'organization_role',
                           Coding(system=self.organization_role.system, code=self.organization_role.code))
        object.__setattr__(self, 'practitioner_role',
                           _normalize_practitioner_role(self.local_identity, self.practitioner_role))


Subject = Union[All, Organization, Role]


class RequesterFactory:
    """Named constructors for every requester combination."""

    @staticmethod
    def local_all() -> All:
        return All(True)

    @staticmethod
    def local_all_practitioner(practitioner_role_system: str, practitioner_role_code: str) -> All:
        return All(True, Coding(practitioner_role_system, practitioner_role_code))

    @staticmethod
    def remote_all() -> All:
        return All(False)

    @staticmethod
    def local_organization(organization_identifier: str) -> Organization:
        return Organization(True, organization_identifier)

    @staticmethod
    def local_organization_practitioner(organization_identifier: str, practitioner_role_system: str,
                                        practitioner_role_code: str) -> Organization:
        return Organization(True, organization_identifier,
                            Coding(practitioner_role_system, practitioner_role_code))

    @staticmethod
    def remote_organization(organization_identifier: str) -> Organization:
        return Organization(False, organization_identifier)

    @staticmethod
    def local_role(parent_organization_identifier: str, organization_role_system: str,
                   organization_role_code: str) -> Role:
        return Role(True, parent_organization_identifier,
                    Coding(organization_role_system, organization_role_code))

    @staticmethod
    def local_role_practitioner(parent_organization_identifier: str, organization_role_system: str,
                                organization_role_code: str, practitioner_role_system: str,
                                practitioner_role_code: str) -> Role:
        return Role(True, parent_organization_identifier,
                    Coding(organization_role_system, organization_role_code),
                    Coding(practitioner_role_system, practitioner_role_code))

    @staticmethod
    def remote_role(parent_organization_identifier: str, organization_role_system: str,
                    organization_role_code: str) -> Role:
        return Role(False, parent_organization_identifier,
                    Coding(organization_role_system, organization_role_code))


class RecipientFactory:
    """Named constructors for recipients; recipients are always local organizations."""

    @staticmethod
    def local_all() -> All:
        return All(True)

    @staticmethod
    def local_organization(organization_identifier: str) -> Organization:
        return Organization(True, organization_identifier)

    @staticmethod
    def local_role(parent_organization_identifier: str, organization_role_system: str,
                   organization_role_code: str) -> Role:
        return Role(True, parent_organization_identifier,
                    Coding(organization_role_system, organization_role_code))


requester = RequesterFactory()
recipient = RecipientFactory()
