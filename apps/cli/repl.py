from __future__ import annotations

import atexit
import getpass
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Literal, TextIO

# Enable readline for arrow keys, history navigation, and line editing.
try:
    import readline
except ImportError:
    readline = None  # type: ignore[assignment]  # Windows fallback

from apps.cli.output import clear_screen, overwrite_line
from apps.cli.progress import ProgressIndicator
from apps.cli.render import ResponseRenderer
from filechat.remote import AssistantService
from filechat.session import SessionOrchestrator


logger = logging.getLogger(__name__)

Command = Literal["exit", "new", "index", "reset", "blank", "query"]

_COMMANDS = ["exit", "new", "index", "reset"]


def config_dir() -> Path:
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_config_home) if xdg_config_home else (Path.home() / ".config")
    return base / "filechat"


def setup_readline() -> None:
    """Persistent input history and tab completion of commands."""
    if readline is None:
        return
    history_file = config_dir() / "history"
    try:
        history_file.parent.mkdir(parents=True, exist_ok=True)
        readline.read_history_file(history_file)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.debug("history unavailable: %s", exc)
        return
    readline.set_history_length(1000)
    atexit.register(readline.write_history_file, history_file)

    def completer(text: str, state: int) -> str | None:
        matches = [cmd for cmd in _COMMANDS if cmd.startswith(text)] if text else []
        return matches[state] if state < len(matches) else None

    readline.set_completer(completer)
    readline.parse_and_bind("tab: complete")


def default_prompt() -> str:
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "you"
    return f"{user}: "


def classify(raw: str) -> Command:
    line = raw.strip()
    if line == "exit":
        return "exit"
    if line == "new":
        return "new"
    if line == "index":
        return "index"
    if line == "reset":
        return "reset"
    if not line:
        return "blank"
    return "query"


class ConversationLoop:
    """Prompt, dispatch one command or question, repeat until ``exit``.

    A failing turn is logged and the loop goes back to the prompt; only
    ``exit`` or end of input stop it.
    """

    def __init__(
        self,
        *,
        orchestrator: SessionOrchestrator,
        service: AssistantService,
        progress: ProgressIndicator,
        renderer: ResponseRenderer,
        prompt: str | None = None,
        input_fn: Callable[[str], str] = input,
        file: TextIO | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.service = service
        self.progress = progress
        self.renderer = renderer
        self.prompt = prompt if prompt is not None else default_prompt()
        self._input = input_fn
        self._file = file

    def _print(self, text: str = "") -> None:
        print(text, file=self._file if self._file is not None else sys.stdout)

    def handle(self, raw: str) -> bool:
        """Run one command; returns False when the loop should stop."""
        command = classify(raw)
        if command == "exit":
            return False
        if command == "new":
            self.orchestrator.discard_thread()
            self._print("New thread created\n")
        elif command == "index":
            self.orchestrator.reindex()
        elif command == "reset":
            self.orchestrator.reset_all(progress=lambda n: overwrite_line(f"....{n}", file=self._file))
        elif command == "blank":
            clear_screen(file=self._file)
            self._print()
        else:
            self.ask(raw.strip())
        return True

    def ask(self, question: str) -> None:
        session = self.orchestrator.ensure_session()
        self.service.create_message(session.thread_id, question)
        self.progress.start()
        try:
            self.renderer.render(self.service.stream_run(session.thread_id, session.assistant_id))
        finally:
            self.progress.stop()

    def run(self) -> int:
        while True:
            try:
                raw = self._input(self.prompt)
            except EOFError:
                self._print()
                return 0
            except KeyboardInterrupt:
                self._print("^C")
                continue

            try:
                if not self.handle(raw):
                    return 0
            except KeyboardInterrupt:
                self.progress.stop()
                self._print("^C")
            except Exception as exc:
                self.progress.stop()
                logger.error("error: %s", exc, exc_info=logger.isEnabledFor(logging.DEBUG))
