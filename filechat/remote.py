"""Thin wrapper over the OpenAI assistants API.

Only the calls the session needs are exposed, with plain ids and small
dataclasses instead of SDK objects. Every SDK failure is re-raised as
:class:`RemoteError` so callers handle a single exception type.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Iterator, Sequence

import openai
from openai import OpenAI


logger = logging.getLogger(__name__)

MESSAGE_COMPLETED = "thread.message.completed"
RUN_FAILED_EVENTS = frozenset(
    {
        "thread.run.failed",
        "thread.run.cancelled",
        "thread.run.expired",
        "thread.run.incomplete",
    }
)
STREAM_ERROR = "error"

# Runs in these states still hold the thread and must be cancelled before deletion.
ACTIVE_RUN_STATUSES = frozenset({"queued", "in_progress", "requires_action"})


@dataclass(eq=False)
class RemoteError(RuntimeError):
    message: str
    operation: str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.append(f"operation={self.operation}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        return " ".join(parts)


@dataclass(frozen=True)
class Annotation:
    text: str
    file_id: str | None = None


@dataclass(frozen=True)
class CompletedMessage:
    content_type: str
    text: str = ""
    annotations: list[Annotation] = field(default_factory=list)


@dataclass(frozen=True)
class RunEvent:
    event: str
    message: CompletedMessage | None = None
    error: str | None = None


@dataclass(frozen=True)
class RunInfo:
    id: str
    status: str


@dataclass(frozen=True)
class IngestionResult:
    status: str
    completed: int = 0
    failed: int = 0
    total: int = 0


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except openai.APIStatusError as exc:
        raise RemoteError(str(exc.message), operation=operation, status_code=exc.status_code) from exc
    except openai.OpenAIError as exc:
        raise RemoteError(str(exc) or type(exc).__name__, operation=operation) from exc


def _annotation_from_sdk(obj: Any) -> Annotation:
    citation = getattr(obj, "file_citation", None)
    file_id = getattr(citation, "file_id", None) if citation is not None else None
    return Annotation(text=getattr(obj, "text", "") or "", file_id=file_id)


def completed_message_from_sdk(message: Any) -> CompletedMessage:
    """Reduce an SDK ``Message`` to its first content block."""
    content = list(getattr(message, "content", None) or [])
    if not content:
        return CompletedMessage(content_type="empty")
    block = content[0]
    block_type = getattr(block, "type", "unknown")
    if block_type != "text":
        return CompletedMessage(content_type=block_type)
    text = block.text
    annotations = [_annotation_from_sdk(a) for a in (getattr(text, "annotations", None) or [])]
    return CompletedMessage(content_type="text", text=text.value or "", annotations=annotations)


def run_event_from_sdk(event: Any) -> RunEvent:
    name = getattr(event, "event", "")
    data = getattr(event, "data", None)
    if name == MESSAGE_COMPLETED:
        return RunEvent(event=name, message=completed_message_from_sdk(data))
    if name in RUN_FAILED_EVENTS:
        last_error = getattr(data, "last_error", None)
        detail = getattr(last_error, "message", None) or f"run ended with status {getattr(data, 'status', name)}"
        return RunEvent(event=name, error=detail)
    if name == STREAM_ERROR:
        return RunEvent(event=name, error=getattr(data, "message", None) or "stream error")
    return RunEvent(event=name)


class AssistantService:
    def __init__(self, client: OpenAI | None = None) -> None:
        self._client = client if client is not None else OpenAI()

    # -- vector stores -----------------------------------------------------

    def create_vector_store(self, name: str) -> str:
        with _translate_errors("create vector store"):
            store = self._client.vector_stores.create(name=name)
        logger.info("created vector store %s", store.id)
        return store.id

    def retrieve_vector_store(self, vector_store_id: str) -> str:
        with _translate_errors("retrieve vector store"):
            store = self._client.vector_stores.retrieve(vector_store_id)
        return store.id

    def upload_files(self, vector_store_id: str, streams: Sequence[BinaryIO]) -> IngestionResult:
        """Upload already-opened files as one batch and block until ingestion finishes.

        The caller owns the streams and closes them.
        """
        with _translate_errors("upload files"):
            batch = self._client.vector_stores.file_batches.upload_and_poll(
                vector_store_id=vector_store_id,
                files=list(streams),
            )
        counts = getattr(batch, "file_counts", None)
        return IngestionResult(
            status=getattr(batch, "status", "unknown"),
            completed=getattr(counts, "completed", 0) or 0,
            failed=getattr(counts, "failed", 0) or 0,
            total=getattr(counts, "total", 0) or 0,
        )

    def list_vector_store_ids(self) -> list[str]:
        with _translate_errors("list vector stores"):
            return [vs.id for vs in self._client.vector_stores.list()]

    def delete_vector_store(self, vector_store_id: str) -> None:
        with _translate_errors("delete vector store"):
            self._client.vector_stores.delete(vector_store_id)

    # -- assistants --------------------------------------------------------

    def create_assistant(self, *, name: str, instructions: str, model: str) -> str:
        with _translate_errors("create assistant"):
            assistant = self._client.beta.assistants.create(
                name=name,
                instructions=instructions,
                model=model,
                tools=[{"type": "file_search"}],
            )
        logger.info("created assistant %s", assistant.id)
        return assistant.id

    def attach_vector_store(self, assistant_id: str, vector_store_id: str) -> None:
        with _translate_errors("update assistant"):
            self._client.beta.assistants.update(
                assistant_id,
                tool_resources={"file_search": {"vector_store_ids": [vector_store_id]}},
            )

    def list_assistant_ids(self) -> list[str]:
        with _translate_errors("list assistants"):
            return [a.id for a in self._client.beta.assistants.list()]

    def delete_assistant(self, assistant_id: str) -> None:
        with _translate_errors("delete assistant"):
            self._client.beta.assistants.delete(assistant_id)

    # -- files -------------------------------------------------------------

    def filename_for(self, file_id: str) -> str:
        with _translate_errors("retrieve file"):
            return self._client.files.retrieve(file_id).filename

    def list_file_ids(self) -> list[str]:
        with _translate_errors("list files"):
            return [f.id for f in self._client.files.list()]

    def delete_file(self, file_id: str) -> None:
        with _translate_errors("delete file"):
            self._client.files.delete(file_id)

    # -- threads and runs --------------------------------------------------

    def create_thread(self) -> str:
        with _translate_errors("create thread"):
            thread = self._client.beta.threads.create()
        logger.info("created thread %s", thread.id)
        return thread.id

    def delete_thread(self, thread_id: str) -> None:
        with _translate_errors("delete thread"):
            self._client.beta.threads.delete(thread_id)

    def list_runs(self, thread_id: str) -> list[RunInfo]:
        with _translate_errors("list runs"):
            return [RunInfo(id=r.id, status=r.status) for r in self._client.beta.threads.runs.list(thread_id)]

    def cancel_run(self, thread_id: str, run_id: str) -> None:
        with _translate_errors("cancel run"):
            self._client.beta.threads.runs.cancel(run_id, thread_id=thread_id)

    def create_message(self, thread_id: str, text: str) -> None:
        with _translate_errors("create message"):
            self._client.beta.threads.messages.create(thread_id, role="user", content=text)

    def stream_run(self, thread_id: str, assistant_id: str) -> Iterator[RunEvent]:
        """Start a run and yield its events in production order."""
        with _translate_errors("stream run"):
            with self._client.beta.threads.runs.stream(thread_id=thread_id, assistant_id=assistant_id) as stream:
                for event in stream:
                    yield run_event_from_sdk(event)
