from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from filechat.discovery import split_paths
from filechat.store import DEFAULT_CACHE_FILE


DEFAULT_VECTOR_STORE_NAME = "AssistantRAGFileStore"
DEFAULT_ASSISTANT_NAME = "File Assistant"
DEFAULT_MODEL = "gpt-4o"

DEFAULT_INSTRUCTIONS = (
    "You are an assistant who can help users find files on their computer, summarize them and "
    "provide information about the files. You can search for files by name, type, content or "
    "semantics. DO NOT show any sensitive information like name, address, SSN, date of birth, "
    "in your responses. Hide and redact them if needed. If the question is not about the "
    "document or can't be found in documents, you can use your own knowledge to provide the answer."
)


@dataclass
class Settings:
    roots: list[str] = field(default_factory=list)
    cache_file: Path = Path(DEFAULT_CACHE_FILE)
    vector_store_name: str = DEFAULT_VECTOR_STORE_NAME
    assistant_name: str = DEFAULT_ASSISTANT_NAME
    instructions: str = DEFAULT_INSTRUCTIONS
    model: str = DEFAULT_MODEL

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            roots=split_paths(env.get("DEFAULT_PATHS")),
            cache_file=Path(env.get("OPENAI_CONFIG_CACHE") or DEFAULT_CACHE_FILE),
            vector_store_name=env.get("VECTOR_STORE_NAME") or DEFAULT_VECTOR_STORE_NAME,
            assistant_name=env.get("ASSISTANT_NAME") or DEFAULT_ASSISTANT_NAME,
            instructions=env.get("DEFAULT_INSTRUCTIONS") or DEFAULT_INSTRUCTIONS,
            model=env.get("ASSISTANT_MODEL") or DEFAULT_MODEL,
        )
