"""Provisioning of the remote index, assistant and thread.

Each step first consults the :class:`~filechat.store.ConfigStore`; a cached id
means the resource already exists and nothing is created. An id is cached only
after the remote call that produced it succeeded, so a failed step is simply
retried on the next call.

The orchestrator is not thread-safe: the check-then-create sequences assume a
single caller.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Callable, Sequence

from filechat import store as keys
from filechat.discovery import DiscoveryResult, discover_files
from filechat.remote import ACTIVE_RUN_STATUSES, AssistantService, RemoteError
from filechat.settings import Settings
from filechat.store import ConfigStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    assistant_id: str
    thread_id: str


def _megabytes(size: int) -> float:
    return size / (1024 * 1024)


class SessionOrchestrator:
    def __init__(
        self,
        *,
        service: AssistantService,
        store: ConfigStore,
        settings: Settings,
        discover: Callable[[Sequence[str]], DiscoveryResult] = discover_files,
        echo: Callable[[str], None] = print,
    ) -> None:
        self.service = service
        self.store = store
        self.settings = settings
        self._discover = discover
        self._echo = echo

    # -- provisioning ------------------------------------------------------

    def ensure_index(self, roots: Sequence[str] | None = None) -> str:
        vector_store_id = self.store.get(keys.VECTOR_STORE_ID)
        if vector_store_id and self.store.get(keys.FILES_PROCESSED):
            return vector_store_id
        # A cached id without the processed flag means a previous upload never finished.
        return self.ingest(roots)

    def ingest(self, roots: Sequence[str] | None = None) -> str:
        """Discover files and ingest them into the (cached or new) vector store."""
        found = self._discover(roots if roots is not None else self.settings.roots)
        self._echo(
            f"Indexing {len(found.files)} files with total size of {_megabytes(found.total_size):.2f} MB"
        )

        with ExitStack() as stack:
            # Every file is opened before the index is touched, so an unreadable file
            # fails the step without creating or caching anything.
            streams = [stack.enter_context(open(p, "rb")) for p in found.paths]

            vector_store_id = self.store.get(keys.VECTOR_STORE_ID)
            if vector_store_id:
                vector_store_id = self.service.retrieve_vector_store(vector_store_id)
            else:
                vector_store_id = self.service.create_vector_store(self.settings.vector_store_name)
            self.store.set(keys.VECTOR_STORE_ID, vector_store_id)

            if streams:
                result = self.service.upload_files(vector_store_id, streams)
                logger.info(
                    "ingestion %s: completed=%d failed=%d total=%d",
                    result.status,
                    result.completed,
                    result.failed,
                    result.total,
                )
                self._echo("Finished uploading files to vector store")
                self._echo(f"Files processed: {result.completed}/{result.total} (failed: {result.failed})")
            else:
                logger.warning("no supported files found; vector store %s left empty", vector_store_id)
        self.store.set(keys.FILES_PROCESSED, True)
        return vector_store_id

    def ensure_assistant(self) -> str:
        assistant_id = self.store.get(keys.ASSISTANT_ID)
        if assistant_id:
            return assistant_id
        assistant_id = self.service.create_assistant(
            name=self.settings.assistant_name,
            instructions=self.settings.instructions,
            model=self.settings.model,
        )
        vector_store_id = self.ensure_index()
        self.service.attach_vector_store(assistant_id, vector_store_id)
        self.store.set(keys.ASSISTANT_ID, assistant_id)
        return assistant_id

    def ensure_thread(self) -> str:
        thread_id = self.store.get(keys.THREAD_ID)
        if thread_id:
            return thread_id
        thread_id = self.service.create_thread()
        self.store.set(keys.THREAD_ID, thread_id)
        return thread_id

    def ensure_session(self) -> Session:
        assistant_id = self.ensure_assistant()
        thread_id = self.ensure_thread()
        return Session(assistant_id=assistant_id, thread_id=thread_id)

    # -- teardown ----------------------------------------------------------

    def discard_thread(self) -> bool:
        """Cancel active runs, delete the cached thread and forget its id."""
        thread_id = self.store.get(keys.THREAD_ID)
        if not thread_id:
            return False
        try:
            for run in self.service.list_runs(thread_id):
                if run.status in ACTIVE_RUN_STATUSES:
                    self._echo(f"Canceling run {run.id}")
                    self.service.cancel_run(thread_id, run.id)
            self.service.delete_thread(thread_id)
        except RemoteError as exc:
            if exc.status_code != 404:
                raise
            logger.warning("thread %s no longer exists remotely; forgetting it", thread_id)
        self.store.set(keys.THREAD_ID, None)
        return True

    def reindex(self, roots: Sequence[str] | None = None) -> str:
        self.discard_thread()
        return self.ingest(roots)

    def reset_all(self, *, progress: Callable[[int], None] | None = None) -> None:
        """Delete every assistant, file and vector store of the account, then clear the cache."""
        self.discard_thread()

        for assistant_id in self.service.list_assistant_ids():
            self._echo(f"Deleting assistant {assistant_id}")
            self.service.delete_assistant(assistant_id)

        file_ids = self.service.list_file_ids()
        self._echo(f"Deleting {len(file_ids)} files")
        for n, file_id in enumerate(file_ids):
            if progress is not None:
                progress(n)
            self.service.delete_file(file_id)
        if file_ids and progress is not None:
            # Terminate the in-place counter line.
            self._echo("")

        for vector_store_id in self.service.list_vector_store_ids():
            self._echo(f"Deleting vector store {vector_store_id}")
            self.service.delete_vector_store(vector_store_id)

        self.store.clear()
