from __future__ import annotations

import sys
from typing import TextIO


BLUE = "\033[34m"
RESET = "\033[0m"
CLEAR_SCREEN = "\033[2J\033[H"
# Carriage return + erase entire line.
CLEAR_LINE = "\r\033[2K"


def blue_text(text: str, *, file: TextIO | None = None) -> None:
    out = file if file is not None else sys.stdout
    print(f"{BLUE}{text}{RESET}", file=out)


def clear_screen(*, file: TextIO | None = None) -> None:
    out = file if file is not None else sys.stdout
    print(CLEAR_SCREEN, end="", file=out, flush=True)


def overwrite_line(text: str, *, file: TextIO | None = None) -> None:
    out = file if file is not None else sys.stdout
    out.write(CLEAR_LINE + text)
    out.flush()
