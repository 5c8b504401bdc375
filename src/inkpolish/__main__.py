"""Command-line entry point: enhance text from arguments or stdin."""

import argparse
import asyncio
import sys
from typing import List, Optional

from inkpolish import __app_name__, __version__
from inkpolish.app import ServiceContainer, build_services
from inkpolish.core.errors import EnhancementError
from inkpolish.core.providers import ProviderError
from inkpolish.utils.logger import get_logger, shutdown_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inkpolish",
        description="Enhance transcribed text with an LLM provider.",
    )
    parser.add_argument("text", nargs="?", help="Text to enhance (default: stdin)")
    parser.add_argument("--provider", help="Select a provider before enhancing")
    parser.add_argument("--model", help="Select a model for the provider")
    parser.add_argument("--prompt", help="Activate the prompt with this title")
    parser.add_argument("--api-key", help="Verify and store an API key for the provider")
    parser.add_argument(
        "--clipboard",
        action="store_true",
        help="Include clipboard text as context",
    )
    parser.add_argument(
        "--list-models", action="store_true", help="List models and exit"
    )
    parser.add_argument(
        "--check", action="store_true", help="Check provider connectivity and exit"
    )
    parser.add_argument(
        "--version", action="version", version=f"{__app_name__} {__version__}"
    )
    return parser


def _activate_prompt(services: ServiceContainer, title: str) -> bool:
    for prompt in services.prompts.all_prompts():
        if prompt.title.lower() == title.lower():
            services.prompts.set_active(prompt.id)
            return True
    return False


async def run(args: argparse.Namespace, services: ServiceContainer) -> int:
    session = services.session

    if args.provider:
        try:
            session.select_provider(args.provider)
        except KeyError:
            print(f"Unknown provider: {args.provider}", file=sys.stderr)
            print(f"Available: {', '.join(services.catalog.kinds())}", file=sys.stderr)
            return 2
        await session.wait_for_background_tasks()
    else:
        await services.start()

    if args.api_key and not await session.save_api_key(args.api_key):
        print("API key was rejected.", file=sys.stderr)
        return 1

    if args.model:
        session.select_model(args.model)

    if args.prompt and not _activate_prompt(services, args.prompt):
        print(f"No prompt titled '{args.prompt}'", file=sys.stderr)
        return 2

    if args.check:
        connected = await session.check_connection()
        print(f"{session.descriptor.display_name}: {'connected' if connected else 'unreachable'}")
        return 0 if connected else 1

    if args.list_models:
        try:
            models = await session.refresh_models()
        except ProviderError as e:
            print(str(e), file=sys.stderr)
            return 1
        for name in models:
            marker = "*" if name == session.current_model() else " "
            print(f"{marker} {name}")
        return 0

    text = args.text if args.text is not None else sys.stdin.read()
    text = text.strip()

    try:
        result, duration = await services.engine.enhance(
            text, use_clipboard_context=True if args.clipboard else None
        )
    except EnhancementError as e:
        print(e.error_description, file=sys.stderr)
        return 1

    print(result)
    print(f"({duration:.2f}s via {session.selected_kind}/{session.current_model()})", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    services = build_services()
    try:
        return asyncio.run(run(args, services))
    except KeyboardInterrupt:
        return 130
    finally:
        services.shutdown()
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
