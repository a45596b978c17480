#!/usr/bin/env python3
"""
VoiceAI Command Line Interface

Main entry point for the `voiceai` command. Every subcommand prints JSON.

Usage:
    voiceai parse "clock me in"                     # Interpret a transcript
    voiceai extract "send message to John"          # Extract entities only
    voiceai classify "show team status"             # Local vs. business system
    voiceai render "Welcome to {{businessName}}"    # Render a template
    voiceai process "complete task 5"               # Full pipeline
    voiceai --config args/voice.yaml process "help"
"""

import argparse
import asyncio
import json
import sys

from voiceai import __version__
from voiceai.config_models import load_config
from voiceai.context.business_context import RenderOptions
from voiceai.logging_config import get_logger, setup_logging
from voiceai.session import VoiceSession

logger = get_logger(__name__)


def _print(data) -> None:
    print(json.dumps(data, indent=2, default=str))


async def _with_session(args, run):
    config = load_config(args.config)
    logger.debug("session_config", business=config.business_context.name, path=args.config)
    session = VoiceSession(config)
    try:
        return await run(session)
    finally:
        await session.aclose()


def cmd_parse(args):
    """Handle parse subcommand."""

    async def run(session):
        command = await session.parse_command(args.text)
        _print(command.to_dict())

    asyncio.run(_with_session(args, run))


def cmd_extract(args):
    """Handle extract subcommand."""

    async def run(session):
        _print(session.extract_entities(args.text).to_dict())

    asyncio.run(_with_session(args, run))


def cmd_classify(args):
    """Handle classify subcommand."""

    async def run(session):
        command = await session.parse_command(args.text)
        classification = session.classify_command(command)
        _print({"command": command.to_dict(), "classification": classification.to_dict()})

    asyncio.run(_with_session(args, run))


def cmd_render(args):
    """Handle render subcommand."""

    async def run(session):
        options = RenderOptions(
            preserve_unknown_variables=not args.drop_unknown,
            case_sensitive=not args.ignore_case,
        )
        result = session.render_template(args.template, options)
        _print({"result": result.result, "metrics": result.metrics.to_dict()})

    asyncio.run(_with_session(args, run))


def cmd_process(args):
    """Handle process subcommand."""

    async def run(session):
        response = await session.process_text(args.text)
        _print(response.to_dict())
        return 0 if response.success else 1

    return asyncio.run(_with_session(args, run))


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="voiceai",
        description="VoiceAI - Voice command interpretation for workforce assistants",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument(
        "--config", default=None, help="Path to voice.yaml (default: args/voice.yaml)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser("parse", help="Interpret a transcript")
    parse_parser.add_argument("text", help="Transcript text")
    parse_parser.set_defaults(func=cmd_parse)

    extract_parser = subparsers.add_parser("extract", help="Extract entities from text")
    extract_parser.add_argument("text", help="Transcript text")
    extract_parser.set_defaults(func=cmd_extract)

    classify_parser = subparsers.add_parser(
        "classify", help="Decide whether a command is handled locally"
    )
    classify_parser.add_argument("text", help="Transcript text")
    classify_parser.set_defaults(func=cmd_classify)

    render_parser = subparsers.add_parser(
        "render", help="Render a template against the business context"
    )
    render_parser.add_argument("template", help="Template with {{variables}}")
    render_parser.add_argument(
        "--drop-unknown", action="store_true", help="Remove unknown variables"
    )
    render_parser.add_argument(
        "--ignore-case", action="store_true", help="Match variable names case-insensitively"
    )
    render_parser.set_defaults(func=cmd_render)

    process_parser = subparsers.add_parser("process", help="Run the full pipeline")
    process_parser.add_argument("text", help="Transcript text")
    process_parser.set_defaults(func=cmd_process)

    args = parser.parse_args()

    if args.version:
        print(f"voiceai {__version__}")
        return

    setup_logging(level="DEBUG" if args.verbose else None)

    if not args.command:
        parser.print_help()
        return

    result = args.func(args)

    if isinstance(result, int) and result != 0:
        sys.exit(result)


if __name__ == "__main__":
    main()
