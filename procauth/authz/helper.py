"""
Rule-set validation, authoring and lookup on process definition resources.

A process definition carries zero or more authorization blocks::

    extension-process-authorization
        message-name    (valueString, exactly one)
        task-profile    (valueCanonical, exactly one)
        requester       (valueCoding, one or more)
        recipient       (valueCoding, one or more)
"""

from typing import Collection, Iterable, Iterator, List, Optional, Tuple, Union
import logging

from ..core.config import Config
from ..tree import Canonical, Coding, Extension
from ..util.validation import is_blank, require_non_blank, require_non_empty, require_not_none
from ..resource.types import ProcessDefinition
from .codes import (
    EXTENSION_PROCESS_AUTHORIZATION,
    EXTENSION_PROCESS_AUTHORIZATION_MESSAGE_NAME,
    EXTENSION_PROCESS_AUTHORIZATION_TASK_PROFILE,
    EXTENSION_PROCESS_AUTHORIZATION_REQUESTER,
    EXTENSION_PROCESS_AUTHORIZATION_RECIPIENT,
)
from .codec import (
    ExistencePredicates,
    recipient_from,
    recipient_matches,
    requester_from,
    requester_matches,
    to_recipient_extension,
    to_requester_extension,
)
from .subjects import RecipientSubject, RequesterSubject, Subject


logger = logging.getLogger(__name__)

Subjects = Union[Subject, Iterable[Subject]]
TaskProfiles = Union[str, Collection[str]]


def _as_list(subjects: Optional[Subjects]) -> Optional[List[Subject]]:
    if subjects is None:
        return None
    if isinstance(subjects, (list, tuple, set, frozenset)):
        return list(subjects)
    if isinstance(subjects, (RequesterSubject, RecipientSubject)):
        return [subjects]
    return list(subjects)


def _message_names(block: Extension) -> List[str]:
    return [e.string_value() for e in block.children_with_url(EXTENSION_PROCESS_AUTHORIZATION_MESSAGE_NAME)
            if e.string_value() is not None]


def _task_profiles(block: Extension) -> List[Canonical]:
    return [e.canonical_value() for e in block.children_with_url(EXTENSION_PROCESS_AUTHORIZATION_TASK_PROFILE)
            if e.canonical_value() is not None]


def _has_message_name(block: Extension, message_name: str) -> bool:
    return message_name in _message_names(block)


def _has_task_profile_exact(block: Extension, task_profile: str) -> bool:
    return task_profile in _task_profiles(block)


def _codings(block: Extension, url: str) -> Iterator[Coding]:
    for e in block.children_with_url(url):
        coding = e.coding_value()
        if coding is not None:
            yield coding


class ProcessAuthorizationHelper:
    """
    Validates, extends and queries the authorization rule-set of process definitions.

    Instances hold no state besides configuration and can be shared between threads.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    # -- authoring ------------------------------------------------------------------------------

    def add(self, resource: ProcessDefinition, message_name: str, task_profile: str,
            requesters: Subjects, recipients: Subjects) -> ProcessDefinition:
        """
        Add requesters and recipients to the block of a message name and task profile.

        The block is created if no block with exactly this message name and task profile exists.
        Subjects already present in the block are not added again, so calling add repeatedly
        with the same arguments yields the same resource.

        Args:
            resource: Process definition to extend
            message_name: Message name of the block
            task_profile: Task profile canonical URL of the block, compared exactly
            requesters: A subject or a non-empty collection of subjects
            recipients: A local, non practitioner subject or a non-empty collection of them

        Returns:
            ProcessDefinition: New resource value containing the updated block

        Raises:
            InvalidArgumentError: If an argument is missing, blank or empty, or a recipient is
                remote or practitioner refined
        """
        require_not_none(resource, 'resource')
        require_non_blank(message_name, 'message_name')
        require_non_blank(task_profile, 'task_profile')
        requesters = require_non_empty(_as_list(requesters), 'requesters')
        recipients = require_non_empty(_as_list(recipients), 'recipients')

        # encode first, so an invalid recipient leaves the resource untouched
        requester_nodes = [(r, to_requester_extension(r)) for r in requesters]
        recipient_nodes = [(r, to_recipient_extension(r)) for r in recipients]

        existing = next((b for b in resource.authorization_extensions()
                         if b.has_extension()
                         and _has_message_name(b, message_name)
                         and _has_task_profile_exact(b, task_profile)), None)

        block = existing if existing is not None else Extension(
            EXTENSION_PROCESS_AUTHORIZATION,
            extension=(
                Extension(EXTENSION_PROCESS_AUTHORIZATION_MESSAGE_NAME, message_name),
                Extension(EXTENSION_PROCESS_AUTHORIZATION_TASK_PROFILE, Canonical(task_profile)),
            ))

        added = 0
        for subject, node in requester_nodes:
            if not any(requester_matches(subject, e) for e in block.extension):
                block = block.with_extension(node)
                added += 1
        for subject, node in recipient_nodes:
            if not any(recipient_matches(subject, e) for e in block.extension):
                block = block.with_extension(node)
                added += 1

        if existing is None:
            logger.info(f"Adding authorization block for message {message_name} and profile {task_profile} "
                        f"with {added} entries")
            return resource.with_extension(block)

        if added:
            logger.info(f"Adding {added} entries to authorization block for message {message_name}")
            return resource.replace_extension(existing, block)

        return resource

    # -- validation -----------------------------------------------------------------------------

    def is_valid(self, resource: Optional[ProcessDefinition],
                 predicates: Optional[ExistencePredicates] = None) -> bool:
        """
        Check the whole authorization rule-set of a resource.

        Args:
            resource: Process definition, may be None
            predicates: Existence checks for referenced profiles, roles and organizations;
                everything is assumed to exist if omitted

        Returns:
            bool: False if the resource is None, has no authorization block, any block is
            invalid, or two blocks share a message name
        """
        if resource is None:
            return False

        predicates = predicates or ExistencePredicates.allow_all()
        blocks = list(resource.authorization_extensions())

        if not blocks:
            logger.warning(f"Process definition {resource.url}|{resource.version} has no authorization rules")
            return False

        valid = all([self._is_block_valid(block, predicates) for block in blocks])

        message_names = [names[0] for names in map(_message_names, blocks) if names]
        if len(message_names) != len(blocks) or len(set(message_names)) != len(message_names):
            logger.warning(f"Process definition {resource.url}|{resource.version}: message names not unique")
            valid = False

        return valid

    def _is_block_valid(self, block: Extension, predicates: ExistencePredicates) -> bool:
        if not block.has_extension():
            logger.warning("Authorization block without content")
            return False

        message_names = block.children_with_url(EXTENSION_PROCESS_AUTHORIZATION_MESSAGE_NAME)
        task_profiles = block.children_with_url(EXTENSION_PROCESS_AUTHORIZATION_TASK_PROFILE)
        requesters = block.children_with_url(EXTENSION_PROCESS_AUTHORIZATION_REQUESTER)
        recipients = block.children_with_url(EXTENSION_PROCESS_AUTHORIZATION_RECIPIENT)

        if len(message_names) != 1 or len(task_profiles) != 1 or not requesters or not recipients:
            logger.warning(f"Authorization block with {len(message_names)} message names, "
                           f"{len(task_profiles)} task profiles, {len(requesters)} requesters and "
                           f"{len(recipients)} recipients")
            return False

        message_name = message_names[0].string_value()
        if is_blank(message_name):
            logger.warning("Authorization block with missing or blank message name")
            return False

        task_profile = task_profiles[0].canonical_value()
        if task_profile is None or not predicates.profile_exists(task_profile):
            logger.warning(f"Authorization block for message {message_name}: task profile missing or unknown")
            return False

        for requester in requesters:
            if requester_from(requester.coding_value(), predicates) is None:
                logger.warning(f"Authorization block for message {message_name}: invalid requester")
                return False

        for recipient in recipients:
            if recipient_from(recipient.coding_value(), predicates) is None:
                logger.warning(f"Authorization block for message {message_name}: invalid recipient")
                return False

        return True

    # -- lookup ---------------------------------------------------------------------------------

    def get_requesters(self, resource: Optional[ProcessDefinition], process_url: str, process_version: str,
                       message_name: str, task_profiles: Optional[TaskProfiles]) -> Iterator[Subject]:
        """
        Requesters of the block matching message name and one of the task profiles.

        Entries that can not be decoded are skipped. The result is a generator; call again for
        another pass.
        """
        block = self._find_block(resource, process_url, process_version, message_name, task_profiles)
        if block is None:
            return

        for coding in _codings(block, EXTENSION_PROCESS_AUTHORIZATION_REQUESTER):
            subject = requester_from(coding, ExistencePredicates.allow_all())
            if subject is not None:
                yield subject

    def get_recipients(self, resource: Optional[ProcessDefinition], process_url: str, process_version: str,
                       message_name: str, task_profiles: Optional[TaskProfiles]) -> Iterator[Subject]:
        """
        Recipients of the block matching message name and one of the task profiles.

        Entries that can not be decoded are skipped. The result is a generator; call again for
        another pass.
        """
        block = self._find_block(resource, process_url, process_version, message_name, task_profiles)
        if block is None:
            return

        for coding in _codings(block, EXTENSION_PROCESS_AUTHORIZATION_RECIPIENT):
            subject = recipient_from(coding, ExistencePredicates.allow_all())
            if subject is not None:
                yield subject

    def _find_block(self, resource: Optional[ProcessDefinition], process_url: str, process_version: str,
                    message_name: str, task_profiles: Optional[TaskProfiles]) -> Optional[Extension]:
        if (resource is None or is_blank(process_url) or is_blank(process_version)
                or is_blank(message_name) or task_profiles is None):
            return None

        if process_url != resource.url or process_version != resource.version:
            return None

        if isinstance(task_profiles, str):
            task_profiles = (task_profiles,)

        for block in resource.authorization_extensions():
            if not block.has_extension() or not _has_message_name(block, message_name):
                continue

            match = self._match_task_profile(_task_profiles(block), task_profiles)
            if match is None:
                continue

            stored, requested, exact = match
            if not exact and self.config.warn_on_profile_fallback:
                logger.warning(f"Task profile {requested} matched versioned profile {stored} of message "
                               f"{message_name} by base URL only")
            return block

        return None

    @staticmethod
    def _match_task_profile(stored_profiles: List[Canonical],
                            requested_profiles: Iterable[str]) -> Optional[Tuple[Canonical, str, bool]]:
        """(stored, requested, exact) of the first match, exact matches take precedence."""
        requested_profiles = list(requested_profiles)

        for requested in requested_profiles:
            for stored in stored_profiles:
                if requested == stored:
                    return stored, requested, True

        for requested in requested_profiles:
            for stored in stored_profiles:
                if requested == stored.base:
                    return stored, requested, False

        return None
