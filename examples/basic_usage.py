"""
Basic procauth usage example.

This example demonstrates the fundamental procauth operations:
- Adding authorization rules to a process definition
- Validating the rule-set
- Looking up requesters for a message
- Evaluating callers against the rules
"""

import logging
import os

from procauth import ProcessAuthorizationHelper, ProcessDefinition, requester, recipient
from procauth import is_requester_authorized, load_process_definition
from procauth.authz import ORGANIZATION_IDENTIFIER_SYSTEM
from procauth.identity import (
    Organization,
    OrganizationAffiliation,
    OrganizationIdentity,
    PractitionerIdentity,
)
from procauth.tree import Coding, Identifier


PROCESS_URL = "http://dsf.dev/bpe/Process/ping"
PROCESS_VERSION = "1.0"
TASK_PROFILE = "http://dsf.dev/fhir/StructureDefinition/task-ping"
ROLE_SYSTEM = "http://dsf.dev/fhir/CodeSystem/organization-role"
PRACTITIONER_SYSTEM = "http://dsf.dev/fhir/CodeSystem/practitioner-role"


def org(value):
    return Identifier(ORGANIZATION_IDENTIFIER_SYSTEM, value)


def basic_example():
    """Demonstrate basic procauth usage"""
    print("Basic procauth Example")
    print("=" * 30)

    helper = ProcessAuthorizationHelper()

    # 1. Author rules
    definition = ProcessDefinition(url=PROCESS_URL, version=PROCESS_VERSION, name="Ping", status="active")
    definition = helper.add(
        definition, "ping", TASK_PROFILE + "|" + PROCESS_VERSION,
        [
            requester.remote_role("network.org", ROLE_SYSTEM, "DIC"),
            requester.local_all_practitioner(PRACTITIONER_SYSTEM, "DSF_ADMIN"),
        ],
        recipient.local_all(),
    )
    print(f"✓ Added rules, {len(definition.extension)} authorization block(s)")

    # 2. Validate
    print(f"✓ Rule-set valid: {helper.is_valid(definition)}")

    # 3. Look up and evaluate
    member = Organization(identifiers=(org("hospital.org"),), name="Hospital")
    affiliations = [OrganizationAffiliation.of(org("network.org"), org("hospital.org"), [Coding(ROLE_SYSTEM, "DIC")])]

    callers = {
        "remote DIC hospital": OrganizationIdentity.remote(member),
        "remote hospital without affiliation": OrganizationIdentity.remote(
            Organization(identifiers=(org("clinic.org"),))),
        "local admin": PractitionerIdentity.practitioner(
            Organization(identifiers=(org("local.org"),)), Coding(PRACTITIONER_SYSTEM, "DSF_ADMIN")),
    }

    for name, identity in callers.items():
        # un-versioned profile, matched by base URL
        authorized = any(
            is_requester_authorized(subject, identity, affiliations)
            for subject in helper.get_requesters(definition, PROCESS_URL, PROCESS_VERSION, "ping", TASK_PROFILE)
        )
        print(f"  - {name}: {'authorized' if authorized else 'denied'}")

    # 4. Rules written by other tooling
    path = os.path.join(os.path.dirname(__file__), "ping-process.json")
    loaded = load_process_definition(path)
    print(f"✓ Loaded {os.path.basename(path)}, valid: {helper.is_valid(loaded)}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    basic_example()
