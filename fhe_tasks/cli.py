#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from .commands import COMMAND_MODULES
from .config.logging_config import setup_logger
from .config.testnet import ConfigError
from .setup.credentials import MissingSecretError
from .setup.wallet import MissingEnvironmentError, WalletDecryptionError

logger = logging.getLogger("fhe_tasks.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_MISSING_ENV = 2
EXIT_WALLET_DECRYPT = 3
EXIT_CONFIG = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fhe-tasks",
        description="Deploy and exercise confidential contracts on an FHE-enabled network",
    )
    parser.add_argument("--env-file", help="Path to .env file to load before resolving env vars")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level (default INFO)",
    )
    parser.add_argument(
        "--fhe-backend",
        dest="fhe_backend",
        help="FHE backend as package.module:attr (default: FHE_BACKEND env var)",
    )
    sub = parser.add_subparsers(dest="cmd", metavar="TASK")
    for module in COMMAND_MODULES:
        module.register(sub)
    return parser


def run(args: argparse.Namespace) -> int:
    """Run the selected task and map failures to exit codes."""
    try:
        return args.func(args)
    except MissingEnvironmentError as e:
        logger.error("Error: %s", e)
        return EXIT_MISSING_ENV
    except MissingSecretError as e:
        logger.error("Error: %s", e)
        return EXIT_MISSING_ENV
    except WalletDecryptionError as e:
        logger.error("Decryption failed: %s", e)
        return EXIT_WALLET_DECRYPT
    except ConfigError as e:
        logger.error("Error: %s", e)
        return EXIT_CONFIG
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
    except Exception as e:
        logger.error("Error: %s", e)
        logger.debug("Task failed", exc_info=True)
        return EXIT_FAILURE


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.env_file:
        load_dotenv(args.env_file)
    setup_logger(level=getattr(logging, args.log_level))
    if not getattr(args, "cmd", None):
        parser.print_help()
        return EXIT_FAILURE
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
