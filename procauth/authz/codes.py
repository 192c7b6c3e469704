"""
Process authorization code system, identifier system and extension URLs.

These values are shared with existing rule-author tooling and must not change.
"""

from enum import Enum
from typing import Optional

from ..tree import Coding


PROCESS_AUTHORIZATION_SYSTEM = "http://dsf.dev/fhir/CodeSystem/process-authorization"
ORGANIZATION_IDENTIFIER_SYSTEM = "http://dsf.dev/sid/organization-identifier"

_STRUCTURE_DEFINITION = "http://dsf.dev/fhir/StructureDefinition/"

# Authorization block and its children
EXTENSION_PROCESS_AUTHORIZATION = _STRUCTURE_DEFINITION + "extension-process-authorization"
EXTENSION_PROCESS_AUTHORIZATION_MESSAGE_NAME = "message-name"
EXTENSION_PROCESS_AUTHORIZATION_TASK_PROFILE = "task-profile"
EXTENSION_PROCESS_AUTHORIZATION_REQUESTER = "requester"
EXTENSION_PROCESS_AUTHORIZATION_RECIPIENT = "recipient"

# All
EXTENSION_PROCESS_AUTHORIZATION_PRACTITIONER = _STRUCTURE_DEFINITION + "extension-process-authorization-practitioner"

# Organization
EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION = _STRUCTURE_DEFINITION + "extension-process-authorization-organization"
EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER = (
    _STRUCTURE_DEFINITION + "extension-process-authorization-organization-practitioner")
EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER_ORGANIZATION = "organization"
EXTENSION_PROCESS_AUTHORIZATION_ORGANIZATION_PRACTITIONER_PRACTITIONER_ROLE = "practitioner-role"

# Role
EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE = (
    _STRUCTURE_DEFINITION + "extension-process-authorization-parent-organization-role")
EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PARENT_ORGANIZATION = "parent-organization"
EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_ORGANIZATION_ROLE = "organization-role"
EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PRACTITIONER = (
    _STRUCTURE_DEFINITION + "extension-process-authorization-parent-organization-role-practitioner")
EXTENSION_PROCESS_AUTHORIZATION_PARENT_ORGANIZATION_ROLE_PRACTITIONER_PRACTITIONER_ROLE = "practitioner-role"


class ProcessAuthorizationCode(str, Enum):
    """The nine classification codes of the process-authorization code system."""
    LOCAL_ALL = "LOCAL_ALL"
    LOCAL_ALL_PRACTITIONER = "LOCAL_ALL_PRACTITIONER"
    REMOTE_ALL = "REMOTE_ALL"
    LOCAL_ORGANIZATION = "LOCAL_ORGANIZATION"
    LOCAL_ORGANIZATION_PRACTITIONER = "LOCAL_ORGANIZATION_PRACTITIONER"
    REMOTE_ORGANIZATION = "REMOTE_ORGANIZATION"
    LOCAL_ROLE = "LOCAL_ROLE"
    LOCAL_ROLE_PRACTITIONER = "LOCAL_ROLE_PRACTITIONER"
    REMOTE_ROLE = "REMOTE_ROLE"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def of(cls, coding: Optional[Coding]) -> Optional['ProcessAuthorizationCode']:
        """The code of a process-authorization coding, None for other systems or unknown codes."""
        if coding is None or coding.system != PROCESS_AUTHORIZATION_SYSTEM or not coding.has_code():
            return None
        try:
            return cls(coding.code)
        except ValueError:
            return None


def process_authorization_coding(code: ProcessAuthorizationCode) -> Coding:
    """New classification coding without child extensions."""
    return Coding(system=PROCESS_AUTHORIZATION_SYSTEM, code=code.value)


def is_process_authorization_code(coding: Optional[Coding], code: ProcessAuthorizationCode) -> bool:
    return (coding is not None and coding.has_system() and coding.has_code()
            and coding.system == PROCESS_AUTHORIZATION_SYSTEM and coding.code == code.value)
