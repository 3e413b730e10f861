import os
import sys
from pathlib import Path

import pytest


# Ensure the repository root is on sys.path so tests can import local entrypoints
# like apps.cli.main without requiring an editable install.
_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from filechat.remote import IngestionResult, RunEvent, RunInfo  # noqa: E402


class FakeService:
    """In-memory stand-in for AssistantService that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.assistants: list[str] = []
        self.files: list[str] = []
        self.vector_stores: list[str] = []
        self.threads: list[str] = []
        self.runs: dict[str, list[RunInfo]] = {}
        self.filenames: dict[str, str] = {}
        self.events: list[RunEvent] = []
        self.uploaded: list[list] = []
        self._n = 0

    def _next(self, prefix: str) -> str:
        self._n += 1
        return f"{prefix}_{self._n}"

    def created(self) -> list[tuple]:
        return [c for c in self.calls if c[0].startswith("create")]

    def create_vector_store(self, name):
        vs = self._next("vs")
        self.vector_stores.append(vs)
        self.calls.append(("create_vector_store", name))
        return vs

    def retrieve_vector_store(self, vector_store_id):
        self.calls.append(("retrieve_vector_store", vector_store_id))
        return vector_store_id

    def upload_files(self, vector_store_id, streams):
        streams = list(streams)
        assert all(not s.closed for s in streams)
        self.uploaded.append(streams)
        self.calls.append(("upload_files", vector_store_id, len(streams)))
        return IngestionResult(status="completed", completed=len(streams), total=len(streams))

    def list_vector_store_ids(self):
        return list(self.vector_stores)

    def delete_vector_store(self, vector_store_id):
        self.calls.append(("delete_vector_store", vector_store_id))
        self.vector_stores.remove(vector_store_id)

    def create_assistant(self, *, name, instructions, model):
        a = self._next("asst")
        self.assistants.append(a)
        self.calls.append(("create_assistant", name, model))
        return a

    def attach_vector_store(self, assistant_id, vector_store_id):
        self.calls.append(("attach_vector_store", assistant_id, vector_store_id))

    def list_assistant_ids(self):
        return list(self.assistants)

    def delete_assistant(self, assistant_id):
        self.calls.append(("delete_assistant", assistant_id))
        self.assistants.remove(assistant_id)

    def filename_for(self, file_id):
        self.calls.append(("filename_for", file_id))
        return self.filenames[file_id]

    def list_file_ids(self):
        return list(self.files)

    def delete_file(self, file_id):
        self.calls.append(("delete_file", file_id))
        self.files.remove(file_id)

    def create_thread(self):
        t = self._next("thread")
        self.threads.append(t)
        self.calls.append(("create_thread",))
        return t

    def delete_thread(self, thread_id):
        self.calls.append(("delete_thread", thread_id))
        self.threads.remove(thread_id)

    def list_runs(self, thread_id):
        return list(self.runs.get(thread_id, []))

    def cancel_run(self, thread_id, run_id):
        self.calls.append(("cancel_run", thread_id, run_id))

    def create_message(self, thread_id, text):
        self.calls.append(("create_message", thread_id, text))

    def stream_run(self, thread_id, assistant_id):
        self.calls.append(("stream_run", thread_id, assistant_id))
        yield from self.events


@pytest.fixture
def fake_service() -> FakeService:
    return FakeService()


@pytest.fixture
def docs_tree(tmp_path: Path) -> Path:
    """A small folder of documents; only a.pdf, nested/b.docx and nested/deep/c.pptx qualify."""
    root = tmp_path / "docs"
    (root / "nested" / "deep").mkdir(parents=True)
    (root / "node_modules").mkdir()
    (root / "nested" / "build").mkdir()
    (root / "a.pdf").write_bytes(b"%PDF-1.4 a")
    (root / "nested" / "b.docx").write_bytes(b"PK docx")
    (root / "nested" / "deep" / "c.pptx").write_bytes(b"PK pptx")
    (root / "empty.pdf").write_bytes(b"")
    (root / "notes.txt").write_text("plain text", encoding="utf-8")
    (root / "node_modules" / "ignored.pdf").write_bytes(b"%PDF ignored")
    (root / "nested" / "build" / "ignored.docx").write_bytes(b"PK ignored")
    return root
