"""
Command-line interface for issuing and checking tokens.

The secret and default lifetime come from the environment (JWT_SECRET,
JWT_EXPIRATION_MS). Without JWT_SECRET every run signs with a fresh random
key, so tokens only verify within the run that issued them.
"""

import argparse
import json
import logging
import sys

from .config import TokenServiceConfig
from .errors import ConfigurationError, TokenError
from .logging_config import setup_colorful_logging
from .service import TokenService

logger = logging.getLogger(__name__)


def _parse_claim(raw):
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"claim must look like NAME=VALUE, got {raw!r}")
    return name, value


def create_parser():
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="tokenauth", description="Issue and verify HS256 tokens.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: WARNING",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command", required=True)

    issue_parser = subparsers.add_parser("issue", help="Issue a token for a subject.")
    issue_parser.add_argument("subject")
    issue_parser.add_argument(
        "--claim", action="append", type=_parse_claim, default=[], metavar="NAME=VALUE",
        help="Extra claim; may be repeated.",
    )
    issue_parser.add_argument("--expires-ms", type=int, default=None, help="Lifetime in milliseconds.")

    inspect_parser = subparsers.add_parser("inspect", help="Verify a token and print its claims.")
    inspect_parser.add_argument("token")

    verify_parser = subparsers.add_parser("verify", help="Check a token; exit status 1 if invalid.")
    verify_parser.add_argument("token")
    verify_parser.add_argument("--subject", default=None, help="Expected subject.")

    refresh_parser = subparsers.add_parser("refresh", help="Issue a fresh token from a valid one.")
    refresh_parser.add_argument("token")

    return parser


def handle_issue_command(service, args):
    print(service.issue(args.subject, dict(args.claim), expiration_millis=args.expires_ms))
    return 0


def handle_inspect_command(service, args):
    claims = service.parse(args.token)
    print(json.dumps(claims.to_dict(), indent=2, ensure_ascii=False, sort_keys=True))
    return 0


def handle_verify_command(service, args):
    valid = service.validate(args.token, args.subject)
    print("valid" if valid else "invalid")
    return 0 if valid else 1


def handle_refresh_command(service, args):
    print(service.refresh(args.token))
    return 0


_HANDLERS = {
    "issue": handle_issue_command,
    "inspect": handle_inspect_command,
    "verify": handle_verify_command,
    "refresh": handle_refresh_command,
}


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_colorful_logging(getattr(logging, args.log_level), name="tokenauth")

    try:
        service = TokenService(TokenServiceConfig.from_env())
        return _HANDLERS[args.command](service, args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except TokenError as e:
        print(f"Token error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
