"""
Tests for rule-set validation, authoring and lookup.
"""

import logging

import pytest

from procauth.authz import (
    EXTENSION_PROCESS_AUTHORIZATION,
    ExistencePredicates,
    ProcessAuthorizationHelper,
    process_authorization_coding,
    ProcessAuthorizationCode as Codes,
    recipient,
    requester,
    to_recipient_extension,
    to_requester_extension,
)
from procauth.core.config import Config
from procauth.resource import ProcessDefinition
from procauth.tree import Canonical, Extension
from procauth.types import InvalidArgumentError


PROCESS_URL = "http://dsf.dev/bpe/Process/ping"
PROCESS_VERSION = "1.0"
MESSAGE = "ping"
PROFILE = "http://dsf.dev/fhir/StructureDefinition/task-ping"
VERSIONED_PROFILE = PROFILE + "|1.0"
ROLE_SYSTEM = "http://dsf.dev/fhir/CodeSystem/organization-role"

HELPER_LOGGER = "procauth.authz.helper"


def block(message_name=MESSAGE, task_profile=VERSIONED_PROFILE, requesters=None, recipients=None):
    """Authorization block built by hand, for shapes add() never produces"""
    if requesters is None:
        requesters = [requester.local_all()]
    if recipients is None:
        recipients = [recipient.local_all()]

    children = []
    if message_name is not None:
        children.append(Extension("message-name", message_name))
    if task_profile is not None:
        children.append(Extension("task-profile", Canonical(task_profile)))
    children.extend(to_requester_extension(r) for r in requesters)
    children.extend(to_recipient_extension(r) for r in recipients)
    return Extension(EXTENSION_PROCESS_AUTHORIZATION, extension=children)


@pytest.fixture
def helper():
    return ProcessAuthorizationHelper()


@pytest.fixture
def definition():
    """Process definition without authorization rules"""
    return ProcessDefinition(url=PROCESS_URL, version=PROCESS_VERSION, name="Ping", status="unknown")


@pytest.fixture
def authorized(helper, definition):
    """Process definition with one authorization block"""
    return helper.add(definition, MESSAGE, VERSIONED_PROFILE,
                      [requester.remote_all(), requester.local_organization("org.com")],
                      [recipient.local_all()])


class TestAdd:
    """Test appending requesters and recipients"""

    def test_creates_block(self, authorized, definition):
        """Test a new block is created in construction order"""
        blocks = list(authorized.authorization_extensions())

        assert len(blocks) == 1
        assert [e.url for e in blocks[0].extension] == [
            "message-name", "task-profile", "requester", "requester", "recipient"]
        assert blocks[0].extension[0].value == MESSAGE
        assert blocks[0].extension[1].canonical_value() == VERSIONED_PROFILE

        # original value unchanged
        assert definition.extension == ()

    def test_added_rules_are_valid(self, helper, authorized):
        assert helper.is_valid(authorized)

    def test_idempotent(self, helper, authorized):
        """Test adding the same subjects again does not change the resource"""
        again = helper.add(authorized, MESSAGE, VERSIONED_PROFILE,
                           [requester.remote_all(), requester.local_organization("org.com")],
                           [recipient.local_all()])

        assert again == authorized

    def test_duplicates_in_one_call(self, helper, definition):
        """Test duplicated subjects in one call are added once"""
        result = helper.add(definition, MESSAGE, VERSIONED_PROFILE,
                            [requester.remote_all(), requester.remote_all()], recipient.local_all())

        assert [e.url for e in next(result.authorization_extensions()).extension].count("requester") == 1

    def test_single_subjects(self, helper, definition):
        """Test single subjects are accepted instead of collections"""
        result = helper.add(definition, MESSAGE, VERSIONED_PROFILE, requester.remote_all(), recipient.local_all())

        assert helper.is_valid(result)

    def test_appends_to_existing_block(self, helper, authorized):
        """Test new subjects are appended to the matching block"""
        result = helper.add(authorized, MESSAGE, VERSIONED_PROFILE,
                            requester.local_role("parent.org", ROLE_SYSTEM, "DIC"), recipient.local_all())

        blocks = list(result.authorization_extensions())
        assert len(blocks) == 1
        assert [e.url for e in blocks[0].extension].count("requester") == 3
        assert blocks[0].extension[-1].url == "requester"

    def test_profile_compared_exactly(self, helper, authorized):
        """Test a different task profile creates a second block"""
        result = helper.add(authorized, MESSAGE, PROFILE, requester.remote_all(), recipient.local_all())

        assert len(list(result.authorization_extensions())) == 2
        # two blocks for the same message are not a valid rule-set
        assert not helper.is_valid(result)

    def test_other_extensions_kept(self, helper):
        """Test unrelated extensions stay in place"""
        other = Extension("http://example.com/other", "value")
        definition = ProcessDefinition(url=PROCESS_URL, version=PROCESS_VERSION, extension=(other,))

        result = helper.add(definition, MESSAGE, VERSIONED_PROFILE, requester.remote_all(), recipient.local_all())

        assert result.extension[0] == other
        assert result.extension[1].url == EXTENSION_PROCESS_AUTHORIZATION

    @pytest.mark.parametrize("kwargs", [
        {'resource': None},
        {'message_name': None},
        {'message_name': " "},
        {'task_profile': ""},
        {'requesters': []},
        {'recipients': []},
        {'requesters': None},
    ])
    def test_invalid_arguments(self, helper, definition, kwargs):
        """Test missing, blank or empty arguments raise"""
        arguments = {
            'resource': definition,
            'message_name': MESSAGE,
            'task_profile': VERSIONED_PROFILE,
            'requesters': [requester.remote_all()],
            'recipients': [recipient.local_all()],
        }
        arguments.update(kwargs)

        with pytest.raises(InvalidArgumentError):
            helper.add(**arguments)

    def test_remote_recipient_rejected(self, helper, definition):
        """Test recipients must be local and not practitioner refined"""
        with pytest.raises(InvalidArgumentError):
            helper.add(definition, MESSAGE, VERSIONED_PROFILE, requester.remote_all(), requester.remote_all())


class TestIsValid:
    """Test rule-set validation"""

    def test_missing_resource_or_rules(self, helper, definition):
        """Test validation fails closed"""
        assert not helper.is_valid(None)
        assert not helper.is_valid(definition)

    def test_unique_message_names(self, helper, definition):
        """Test two blocks with the same message name are invalid"""
        valid = definition.with_extension(block(), block(message_name="pong"))
        duplicated = definition.with_extension(block(), block(task_profile=PROFILE))

        assert helper.is_valid(valid)
        assert not helper.is_valid(duplicated)

    @pytest.mark.parametrize("invalid", [
        block(message_name=None),
        block(message_name=" "),
        block(task_profile=None),
        block(requesters=[]),
        block(recipients=[]),
        block().with_extension(Extension("message-name", "pong")),
        block().with_extension(Extension("task-profile", Canonical(PROFILE))),
        Extension(EXTENSION_PROCESS_AUTHORIZATION),
    ], ids=["no-message", "blank-message", "no-profile", "no-requester", "no-recipient",
            "two-messages", "two-profiles", "empty"])
    def test_cardinality(self, helper, definition, invalid):
        """Test each block needs one message name, one profile, requesters and recipients"""
        assert not helper.is_valid(definition.with_extension(invalid))

    def test_message_name_type(self, helper, definition):
        """Test message names must be plain strings and task profiles canonical URLs"""
        wrong_profile = Extension(EXTENSION_PROCESS_AUTHORIZATION, extension=(
            Extension("message-name", MESSAGE),
            Extension("task-profile", VERSIONED_PROFILE),
            to_requester_extension(requester.remote_all()),
            to_recipient_extension(recipient.local_all()),
        ))

        assert not helper.is_valid(definition.with_extension(wrong_profile))

    def test_undecodable_entries(self, helper, definition):
        """Test one undecodable requester or recipient invalidates the rule-set"""
        bad_requester = block().with_extension(
            Extension("requester", process_authorization_coding(Codes.LOCAL_ORGANIZATION)))
        remote_recipient = block().with_extension(
            Extension("recipient", process_authorization_coding(Codes.REMOTE_ALL)))

        assert not helper.is_valid(definition.with_extension(bad_requester))
        assert not helper.is_valid(definition.with_extension(remote_recipient))

    def test_existence_predicates(self, helper, authorized):
        """Test supplied predicates are applied to profiles and references"""
        assert helper.is_valid(authorized, ExistencePredicates(profile_exists=lambda p: p == VERSIONED_PROFILE))
        assert not helper.is_valid(authorized, ExistencePredicates(profile_exists=lambda p: False))
        assert not helper.is_valid(authorized, ExistencePredicates(
            organization_with_identifier_exists=lambda i: i.value != "org.com"))

    def test_invalid_rules_logged(self, helper, definition, caplog):
        with caplog.at_level(logging.WARNING, logger=HELPER_LOGGER):
            helper.is_valid(definition)

        assert "no authorization rules" in caplog.text


class TestLookup:
    """Test requester and recipient lookups"""

    def test_requesters(self, helper, authorized):
        result = list(helper.get_requesters(authorized, PROCESS_URL, PROCESS_VERSION, MESSAGE, [VERSIONED_PROFILE]))

        assert result == [requester.remote_all(), requester.local_organization("org.com")]

    def test_recipients(self, helper, authorized):
        result = list(helper.get_recipients(authorized, PROCESS_URL, PROCESS_VERSION, MESSAGE, [VERSIONED_PROFILE]))

        assert result == [recipient.local_all()]

    def test_single_profile_string(self, helper, authorized):
        """Test a single task profile may be passed as string"""
        result = list(helper.get_recipients(authorized, PROCESS_URL, PROCESS_VERSION, MESSAGE, VERSIONED_PROFILE))

        assert result == [recipient.local_all()]

    def test_restartable(self, helper, authorized):
        """Test every call gives a fresh pass"""
        first = list(helper.get_requesters(authorized, PROCESS_URL, PROCESS_VERSION, MESSAGE, [VERSIONED_PROFILE]))
        second = list(helper.get_requesters(authorized, PROCESS_URL, PROCESS_VERSION, MESSAGE, [VERSIONED_PROFILE]))

        assert first == second
        assert len(first) == 2

    def test_profile_fallback(self, helper, authorized, caplog):
        """Test an unversioned profile matches a stored versioned profile and warns"""
        with caplog.at_level(logging.WARNING, logger=HELPER_LOGGER):
            result = list(helper.get_requesters(authorized, PROCESS_URL, PROCESS_VERSION, MESSAGE, [PROFILE]))

        assert result == [requester.remote_all(), requester.local_organization("org.com")]
        assert "base URL only" in caplog.text

    def test_profile_fallback_warning_disabled(self, authorized, caplog):
        helper = ProcessAuthorizationHelper(Config(warn_on_profile_fallback=False))

        with caplog.at_level(logging.WARNING, logger=HELPER_LOGGER):
            result = list(helper.get_requesters(authorized, PROCESS_URL, PROCESS_VERSION, MESSAGE, [PROFILE]))

        assert len(result) == 2
        assert "base URL only" not in caplog.text

    def test_exact_match_does_not_warn(self, helper, authorized, caplog):
        with caplog.at_level(logging.WARNING, logger=HELPER_LOGGER):
            list(helper.get_requesters(authorized, PROCESS_URL, PROCESS_VERSION, MESSAGE,
                                       [PROFILE, VERSIONED_PROFILE]))

        assert "base URL only" not in caplog.text

    def test_versioned_query_needs_exact_profile(self, helper, authorized):
        """Test a versioned query does not match another version"""
        assert list(helper.get_requesters(authorized, PROCESS_URL, PROCESS_VERSION, MESSAGE,
                                          [PROFILE + "|2.0"])) == []

    @pytest.mark.parametrize("url, version, message, profiles", [
        ("http://dsf.dev/bpe/Process/other", PROCESS_VERSION, MESSAGE, [VERSIONED_PROFILE]),
        (PROCESS_URL, "2.0", MESSAGE, [VERSIONED_PROFILE]),
        (PROCESS_URL, PROCESS_VERSION, "pong", [VERSIONED_PROFILE]),
        (PROCESS_URL, PROCESS_VERSION, MESSAGE, []),
        (PROCESS_URL, PROCESS_VERSION, MESSAGE, None),
        ("", PROCESS_VERSION, MESSAGE, [VERSIONED_PROFILE]),
        (PROCESS_URL, None, MESSAGE, [VERSIONED_PROFILE]),
        (PROCESS_URL, PROCESS_VERSION, " ", [VERSIONED_PROFILE]),
    ])
    def test_no_match(self, helper, authorized, url, version, message, profiles):
        """Test queries that select no block give empty results"""
        assert list(helper.get_requesters(authorized, url, version, message, profiles)) == []
        assert list(helper.get_recipients(authorized, url, version, message, profiles)) == []

    def test_missing_resource(self, helper):
        assert list(helper.get_requesters(None, PROCESS_URL, PROCESS_VERSION, MESSAGE, [PROFILE])) == []

    def test_malformed_entries_skipped(self, helper, definition):
        """Test undecodable entries are skipped silently"""
        malformed = block(requesters=[requester.remote_all()]).with_extension(
            Extension("requester", process_authorization_coding(Codes.LOCAL_ROLE)),
            Extension("requester", "not a coding"),
            Extension("recipient", process_authorization_coding(Codes.REMOTE_ALL)),
        )
        resource = definition.with_extension(malformed)

        assert list(helper.get_requesters(resource, PROCESS_URL, PROCESS_VERSION, MESSAGE,
                                          [VERSIONED_PROFILE])) == [requester.remote_all()]
        assert list(helper.get_recipients(resource, PROCESS_URL, PROCESS_VERSION, MESSAGE,
                                          [VERSIONED_PROFILE])) == [recipient.local_all()]

    def test_first_matching_block_wins(self, helper, definition):
        resource = definition.with_extension(
            block(requesters=[requester.remote_all()]),
            block(requesters=[requester.local_all()]),
        )

        assert list(helper.get_requesters(resource, PROCESS_URL, PROCESS_VERSION, MESSAGE,
                                          [VERSIONED_PROFILE])) == [requester.remote_all()]
