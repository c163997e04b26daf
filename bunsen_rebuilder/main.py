#!/usr/bin/env python3
"""
Main Entry Point for the BunsenLabs source rebuilder
"""

import argparse
import logging
import signal
import sys

from bunsen_rebuilder.common.config_loader import load_config
from bunsen_rebuilder.common.environment import EnvironmentValidator
from bunsen_rebuilder.common.errors import RebuilderError
from bunsen_rebuilder.common.logging_utils import get_log_file, setup_logging
from bunsen_rebuilder.orchestrator.package_builder import PackageBuilder
from bunsen_rebuilder.orchestrator.policy import PromptPolicy

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "Rebuild BunsenLabs packages from their upstream sources and publish them "
    "into a local APT repository."
)


class UsageParser(argparse.ArgumentParser):
    """Argument errors print the usage to stderr and exit with status 1"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = UsageParser(prog="bunsen-rebuilder", description=DESCRIPTION)
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('--upgrade', action='store_true',
                      help="check installed packages for newer sources, rebuild, publish and upgrade")
    mode.add_argument('--add', nargs='+', metavar='NAME',
                      help="rebuild and publish the named source repositories")
    parser.add_argument('--debug', action='store_true', help="verbose logging")
    return parser


def _terminate(signum, frame):
    # unwinds through the context managers so workspaces are removed
    raise SystemExit(128 + signum)


def install_signal_handlers():
    for signum in (signal.SIGTERM, signal.SIGHUP):
        signal.signal(signum, _terminate)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    category = 'upgrade' if args.upgrade else 'add'

    try:
        config = load_config()
    except RebuilderError as e:
        print(f"❌ {e.describe()}", file=sys.stderr)
        return 1
    if args.debug:
        config['debug_mode'] = True

    log_file = get_log_file(config['log_dir'], category)
    setup_logging(log_file, config['debug_mode'])
    install_signal_handlers()
    logger.info(f"SESSION_START mode={category}")

    try:
        EnvironmentValidator.validate_env(config, require_repository=args.upgrade)
    except RebuilderError as e:
        logger.error(f"❌ {e.describe()}")
        print(f"\n❌ Cannot start: {e} (details in {log_file})", file=sys.stderr)
        return 1

    try:
        builder = PackageBuilder(config, failure_policy=PromptPolicy(), log_file=log_file)
        if args.upgrade:
            exit_code = builder.run_upgrade()
        else:
            exit_code = builder.run_add(args.add)
    except KeyboardInterrupt:
        logger.error("❌ Interrupted")
        return 130
    except Exception as e:
        logger.exception(f"❌ Unexpected error: {e}")
        print(f"\n❌ Unexpected error (details in {log_file})", file=sys.stderr)
        return 1

    logger.info(f"SESSION_END mode={category} exit_code={exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
