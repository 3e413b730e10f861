"""Recursive discovery of supported documents under a set of root folders."""

from __future__ import annotations

import logging
import mimetypes
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence


logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 5 * 1024 * 1024

IGNORED_NAMES = frozenset(
    {
        ".git",
        ".vscode",
        "__pycache__",
        ".DS_Store",
        "node_modules",
        "venv",
        "env",
        "logs",
        "tmp",
        "temp",
        "build",
        "dist",
    }
)

SUPPORTED_TYPES: dict[str, str] = {
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".pdf": "application/pdf",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}

DEFAULT_EXTENSIONS: tuple[str, ...] = tuple(SUPPORTED_TYPES)

# Private table so lookups don't depend on the host's /etc/mime.types.
_MIME = mimetypes.MimeTypes()
for _ext, _type in SUPPORTED_TYPES.items():
    _MIME.add_type(_type, _ext)


class DiscoveryError(ValueError):
    pass


@dataclass(frozen=True)
class FileRecord:
    path: Path
    size: int


@dataclass
class DiscoveryResult:
    files: list[FileRecord] = field(default_factory=list)
    total_size: int = 0

    @property
    def paths(self) -> list[Path]:
        return [f.path for f in self.files]

    def extend(self, other: "DiscoveryResult") -> None:
        self.files.extend(other.files)
        self.total_size += other.total_size


def mime_type_for(path: Path) -> str | None:
    mime, _encoding = _MIME.guess_type(path.name, strict=False)
    return mime


def _is_supported(path: Path, extensions: Sequence[str]) -> bool:
    if path.suffix not in extensions:
        return False
    mime = mime_type_for(path)
    return mime is not None and mime in SUPPORTED_TYPES.values()


def _walk(directory: Path, extensions: Sequence[str], result: DiscoveryResult) -> None:
    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError as exc:
        logger.warning("cannot list %s: %s", directory, exc)
        return

    for entry in entries:
        if entry.name in IGNORED_NAMES:
            continue
        path = Path(entry.path)
        try:
            # Symlinked directories are skipped to avoid cycles.
            if entry.is_dir(follow_symlinks=False):
                _walk(path, extensions, result)
                continue
            if not entry.is_file():
                continue
            if not _is_supported(path, extensions):
                continue
            size = entry.stat().st_size
        except OSError as exc:
            logger.debug("skipping %s: %s", path, exc)
            continue
        if 0 < size < MAX_FILE_SIZE:
            result.files.append(FileRecord(path=Path(os.path.abspath(path)), size=size))
            result.total_size += size
        else:
            logger.debug("skipping %s: size %d out of bounds", path, size)


def discover_folder(folder: str | os.PathLike[str], extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> DiscoveryResult:
    """Depth-first scan of one root; a missing or ignored root yields an empty result."""
    if folder is None or not str(folder).strip():
        raise DiscoveryError("Folder path must be provided")

    root = Path(folder).expanduser()
    result = DiscoveryResult()
    if root.name in IGNORED_NAMES:
        return result
    if not root.exists():
        logger.warning("folder does not exist: %s", root)
        return result
    if root.is_file():
        # A file given directly as a root is filtered like any other file.
        try:
            size = root.stat().st_size
        except OSError:
            return result
        if _is_supported(root, extensions) and 0 < size < MAX_FILE_SIZE:
            result.files.append(FileRecord(path=Path(os.path.abspath(root)), size=size))
            result.total_size = size
        return result

    _walk(root, extensions, result)
    return result


def discover_files(
    folders: Iterable[str | os.PathLike[str]] | None,
    extensions: Sequence[str] | None = None,
) -> DiscoveryResult:
    """Collect supported files under every root, preserving traversal order."""
    if folders is None:
        raise DiscoveryError("Folder path must be provided")
    roots = [f for f in folders]
    if not roots:
        raise DiscoveryError("Folder path must be provided")

    exts = tuple(extensions) if extensions is not None else DEFAULT_EXTENSIONS
    combined = DiscoveryResult()
    for root in roots:
        combined.extend(discover_folder(root, exts))
    return combined


def split_paths(value: str | None) -> list[str]:
    """Split a comma-separated root list (as used by DEFAULT_PATHS)."""
    if not value:
        return []
    return [p.strip() for p in value.split(",") if p.strip()]
