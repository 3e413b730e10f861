"""`filechat` - chat with local documents through a hosted assistant.

Run from source with:
  `python -m apps.cli.main --help`
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from apps.cli.progress import ProgressIndicator
from apps.cli.render import ResponseRenderer
from apps.cli.repl import ConversationLoop, setup_readline
from filechat import __version__
from filechat.discovery import split_paths
from filechat.remote import AssistantService
from filechat.session import SessionOrchestrator
from filechat.settings import Settings
from filechat.store import ConfigStore


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="filechat", description="Chat with local documents through a hosted assistant")
    p.add_argument(
        "--paths",
        default=None,
        help="Comma-separated folders to index (default: $DEFAULT_PATHS)",
    )
    p.add_argument(
        "--cache",
        default=None,
        help="Cache file holding remote resource ids (default: $OPENAI_CONFIG_CACHE or config.json)",
    )
    p.add_argument("--model", default=None, help="Assistant model (default: $ASSISTANT_MODEL or gpt-4o)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def resolve_settings(args: argparse.Namespace, base: Settings) -> Settings:
    if args.paths is not None:
        base.roots = split_paths(args.paths)
    if args.cache is not None:
        base.cache_file = Path(args.cache)
    if args.model is not None:
        base.model = args.model
    return base


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s" if not args.verbose else "%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    load_dotenv()
    settings = resolve_settings(args, Settings.from_env())

    store = ConfigStore(settings.cache_file).load()
    service = AssistantService()
    orchestrator = SessionOrchestrator(service=service, store=store, settings=settings)
    progress = ProgressIndicator()
    renderer = ResponseRenderer(resolve_filename=service.filename_for, progress=progress)

    setup_readline()
    loop = ConversationLoop(orchestrator=orchestrator, service=service, progress=progress, renderer=renderer)
    return loop.run()


if __name__ == "__main__":
    raise SystemExit(main())
