"""Rendering of a streamed assistant answer with numbered citations.

Inline markers and the printed source list are numbered independently:

* every annotation's span is replaced by ``[i]`` where ``i`` is its position in
  the message's annotation list, whatever its type;
* cited files are listed once each, numbered from 1 in order of first citation.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence, TextIO

from apps.cli.output import blue_text
from apps.cli.progress import ProgressIndicator
from filechat.remote import MESSAGE_COMPLETED, Annotation, RemoteError, RunEvent


@dataclass
class RenderedAnswer:
    text: str
    citations: list[str] = field(default_factory=list)


def rewrite_citations(
    text: str,
    annotations: Sequence[Annotation],
    resolve_filename: Callable[[str], str],
) -> RenderedAnswer:
    names: dict[str, str] = {}
    cited: list[str] = []
    for index, annotation in enumerate(annotations):
        if annotation.text:
            text = text.replace(annotation.text, f"[{index}]", 1)
        if annotation.file_id:
            if annotation.file_id not in names:
                names[annotation.file_id] = resolve_filename(annotation.file_id)
            cited.append(names[annotation.file_id])
    return RenderedAnswer(text=text, citations=list(dict.fromkeys(cited)))


def format_citations(citations: Iterable[str]) -> str:
    return "\n".join(f"{i}. {name}" for i, name in enumerate(citations, start=1))


class ResponseRenderer:
    def __init__(
        self,
        *,
        resolve_filename: Callable[[str], str],
        progress: ProgressIndicator,
        file: TextIO | None = None,
    ) -> None:
        self._resolve_filename = resolve_filename
        self._progress = progress
        self._file = file

    def _out(self) -> TextIO:
        return self._file if self._file is not None else sys.stdout

    def render(self, events: Iterable[RunEvent]) -> RenderedAnswer | None:
        """Consume a run's events and print each completed text message."""
        answer: RenderedAnswer | None = None
        for event in events:
            if event.error is not None:
                self._progress.stop()
                raise RemoteError(event.error, operation=event.event)
            if event.event != MESSAGE_COMPLETED or event.message is None:
                continue
            if event.message.content_type != "text":
                continue
            self._progress.stop()
            answer = rewrite_citations(event.message.text, event.message.annotations, self._resolve_filename)
            self.print_answer(answer)
        return answer

    def print_answer(self, answer: RenderedAnswer) -> None:
        out = self._out()
        blue_text(answer.text, file=out)
        if answer.citations:
            blue_text(format_citations(answer.citations), file=out)
        print("\n", file=out)
