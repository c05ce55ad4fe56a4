#!/usr/bin/env python3
"""
Open WebUI Development Setup: Local LLM (Ollama) + OpenAI API

Checks prerequisites, installs Ollama where it can, writes the backend
environment file, installs dependencies, pulls a couple of small models,
creates launcher scripts and verifies both providers are reachable.

Usage:
    python run.py                    # Full setup
    python run.py --check-only       # Only check prerequisites
    python run.py --skip-models      # Don't pull development models
    python run.py --start            # Set up, then start backend + frontend

Environment Variables:
    - OPENAI_API_KEY: Used instead of prompting for the key
    - DEVSETUP_*: Override any provisioning setting (see devsetup/config.py)

Platform Support:
    - Linux (Ollama installed automatically)
    - macOS (Ollama must be installed manually)
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from devsetup import pipeline, supervisor
from devsetup.config import Settings
from devsetup.console import Color, colorize, print_header, setup_logging
from devsetup.detector import detect, print_summary, require_mandatory
from devsetup.exceptions import SetupError
from devsetup.prompts import TerminalPrompter


logger = logging.getLogger("devsetup")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description='Open WebUI development setup: Ollama + OpenAI API',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py                         # Set up everything
  python run.py --project-root ../webui # Set up another checkout
  python run.py --check-only            # Check prerequisites only
  python run.py --start                 # Set up, then run both dev servers
        """
    )
    parser.add_argument(
        '--project-root',
        type=Path,
        default=None,
        help='Project to provision (default: current directory)'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Run prerequisite checks only, do not install anything'
    )
    parser.add_argument(
        '--skip-models',
        action='store_true',
        help='Do not download the development models'
    )
    parser.add_argument(
        '--skip-verify',
        action='store_true',
        help='Do not test the Ollama / OpenAI connections at the end'
    )
    parser.add_argument(
        '--start',
        action='store_true',
        help='Start backend and frontend once setup completes'
    )
    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.project_root is not None:
        overrides['project_root'] = args.project_root
    return Settings(**overrides)


def check_only(settings: Settings) -> int:
    print_header("Checking prerequisites...")
    report = detect(timeout=settings.version_timeout)
    print_summary(report)
    require_mandatory(report)
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    args = create_argument_parser().parse_args(argv)
    color_enabled = not args.no_color and sys.stdout.isatty()

    try:
        settings = load_settings(args)
    except ValidationError as e:
        setup_logging(color_enabled=color_enabled, verbose=args.verbose)
        logger.error("Invalid configuration:\n%s", e)
        return 1

    setup_logging(settings.log_level, color_enabled=color_enabled, verbose=args.verbose)
    print_header("🚀 Open WebUI Development Setup: Local LLM + OpenAI API")

    try:
        if args.check_only:
            return check_only(settings)

        state = pipeline.run_pipeline(
            settings,
            TerminalPrompter(),
            skip_models=args.skip_models,
            skip_verify=args.skip_verify,
        )
    except SetupError as e:
        logger.error(str(e))
        if e.hint:
            print(f"    {colorize(e.hint, Color.YELLOW)}")
        return 1
    except KeyboardInterrupt:
        print()
        logger.warning("Setup interrupted")
        return 130

    pipeline.print_completion(state, settings)

    if args.start:
        return asyncio.run(supervisor.from_settings(settings).run())
    logger.info("Happy developing! 🎉")
    return 0


if __name__ == '__main__':
    sys.exit(main())
