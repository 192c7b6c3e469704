"""
procauth command line tool

Copyright (c) 2025 the procauth authors.
All rights reserved.
Provided without warranty.

Commands:
  validate FILE                              check the authorization rules of a process definition
  show FILE --message NAME --profile URL     list requesters and recipients of a message
  convert FILE OUTPUT                        rewrite a process definition as JSON or YAML
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from ..core.config import Config
from ..authz import ProcessAuthorizationHelper
from ..authz.subjects import Organization, Role
from ..resource import dump_process_definition, load_process_definition
from ..types.errors import (
    VALIDATION_FAILED, ProcessAuthError, ConfigurationError, create_error_response
)


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def _describe(subject) -> str:
    if isinstance(subject, Organization):
        detail = subject.organization_identifier
    elif isinstance(subject, Role):
        detail = (f"{subject.parent_organization_identifier} "
                  f"{subject.organization_role.system}|{subject.organization_role.code}")
    else:
        detail = ""

    if subject.needs_practitioner_role:
        detail = f"{detail} {subject.practitioner_role.system}|{subject.practitioner_role.code}".strip()

    return f"{subject.code.value} {detail}".strip()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="procauth",
                                     description="Validate and inspect process authorization rules")
    parser.add_argument("--config", help="Configuration file (JSON or YAML), defaults to PROCAUTH_* variables")
    parser.add_argument("--log-level", help="Override the configured log level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate the authorization rules of a process definition")
    validate.add_argument("file", help="Process definition (.json, .yaml or .yml)")
    validate.add_argument("--json", action="store_true", help="Print the result as JSON")

    show = subparsers.add_parser("show", help="List requesters and recipients for a message")
    show.add_argument("file", help="Process definition (.json, .yaml or .yml)")
    show.add_argument("--message", required=True, help="Message name")
    show.add_argument("--profile", action="append", required=True,
                      help="Task profile URL, may be given more than once")

    convert = subparsers.add_parser("convert", help="Rewrite a process definition as JSON or YAML")
    convert.add_argument("file", help="Process definition (.json, .yaml or .yml)")
    convert.add_argument("output", help="Output file")
    convert.add_argument("--format", choices=("json", "yaml"),
                         help="Output format, defaults to the output file extension")

    return parser


def _load_config(args: argparse.Namespace) -> Config:
    config = Config.from_file(args.config) if args.config else Config.from_env()
    if args.log_level:
        config.log_level = args.log_level.upper()
    config.validate()
    return config


def _validate(helper: ProcessAuthorizationHelper, args: argparse.Namespace) -> int:
    definition = load_process_definition(args.file)
    valid = helper.is_valid(definition)

    if args.json:
        if valid:
            print(json.dumps({'valid': True, 'url': definition.url, 'version': definition.version}))
        else:
            error = ProcessAuthError("Process authorization rules not valid", VALIDATION_FAILED,
                                     details={'file': args.file, 'url': definition.url,
                                              'version': definition.version})
            print(json.dumps(create_error_response(error)))
    elif valid:
        print(f"✓ {args.file}: authorization rules valid")
    else:
        print(f"✗ {args.file}: authorization rules not valid")

    logger.info(f"Validated {args.file}: {'valid' if valid else 'not valid'}")
    return EXIT_OK if valid else EXIT_INVALID


def _show(helper: ProcessAuthorizationHelper, args: argparse.Namespace) -> int:
    definition = load_process_definition(args.file)

    requesters = list(helper.get_requesters(definition, definition.url, definition.version,
                                            args.message, args.profile))
    recipients = list(helper.get_recipients(definition, definition.url, definition.version,
                                            args.message, args.profile))

    print(f"Message {args.message} of {definition.url}|{definition.version}")
    print("Requesters:")
    for subject in requesters:
        print(f"  - {_describe(subject)}")
    print("Recipients:")
    for subject in recipients:
        print(f"  - {_describe(subject)}")

    if not requesters and not recipients:
        logger.info(f"No authorization block for message {args.message} and profiles {', '.join(args.profile)}")
    return EXIT_OK


def _convert(helper: ProcessAuthorizationHelper, args: argparse.Namespace) -> int:
    definition = load_process_definition(args.file)
    dump_process_definition(definition, args.output, format_type=args.format,
                            default_format=helper.config.default_resource_format)
    print(f"✓ Wrote {args.output}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the procauth console script"""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args)
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    logging.basicConfig(level=config.log_level_value, format=config.log_format)
    helper = ProcessAuthorizationHelper(config)

    try:
        if args.command == "validate":
            return _validate(helper, args)
        elif args.command == "convert":
            return _convert(helper, args)
        return _show(helper, args)
    except (ProcessAuthError, FileNotFoundError) as e:
        print(f"✗ Unable to load {args.file}: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
