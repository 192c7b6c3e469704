"""
Caller identity and organizational affiliation types.

These are consumed, never produced, by the authorization core: identities come from the
certificate/OIDC layer and affiliations from the organizational directory.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Tuple

from ..tree import Coding, Identifier


@dataclass(frozen=True)
class Organization:
    """
    Organization of a calling identity.
    """
    identifiers: Tuple[Identifier, ...] = ()
    active: bool = True
    name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'identifiers', tuple(self.identifiers))

    def has_identifier(self, system: str, value: str) -> bool:
        """Check for an identifier with exactly this system and value."""
        return any(
            i.has_system() and i.has_value() and i.system == system and i.value == value
            for i in self.identifiers
        )


@dataclass(frozen=True)
class Identity:
    """
    Base identity of a calling party.

    Use OrganizationIdentity or PractitionerIdentity; the evaluator tells the two kinds apart.
    """
    is_local_identity: bool
    organization: Optional[Organization]

    @property
    def practitioner_roles(self) -> FrozenSet[Coding]:
        return frozenset()


@dataclass(frozen=True)
class OrganizationIdentity(Identity):
    """Identity of an organization acting for itself (e.g. a client certificate of a server)."""

    @classmethod
    def local(cls, organization: Optional[Organization]) -> 'OrganizationIdentity':
        return cls(is_local_identity=True, organization=organization)

    @classmethod
    def remote(cls, organization: Optional[Organization]) -> 'OrganizationIdentity':
        return cls(is_local_identity=False, organization=organization)


@dataclass(frozen=True)
class PractitionerIdentity(Identity):
    """Identity of a practitioner acting on behalf of their (always local) organization."""
    roles: FrozenSet[Coding] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, 'roles', frozenset(self.roles))

    @property
    def practitioner_roles(self) -> FrozenSet[Coding]:
        return self.roles

    @classmethod
    def practitioner(cls, organization: Optional[Organization], *roles: Coding) -> 'PractitionerIdentity':
        return cls(is_local_identity=True, organization=organization, roles=frozenset(roles))


@dataclass(frozen=True)
class OrganizationAffiliation:
    """
    Directory record linking a parent organization, a member (participating) organization and
    the member's role codings within the parent.
    """
    organization: Optional[Identifier] = None
    participating_organization: Optional[Identifier] = None
    codes: Tuple[Coding, ...] = ()
    active: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'codes', tuple(self.codes))

    @classmethod
    def of(cls, parent: Identifier, member: Identifier, roles: Iterable[Coding],
           active: bool = True) -> 'OrganizationAffiliation':
        return cls(organization=parent, participating_organization=member, codes=tuple(roles), active=active)
