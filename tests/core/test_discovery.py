from __future__ import annotations

from pathlib import Path

import pytest

from filechat.discovery import (
    IGNORED_NAMES,
    MAX_FILE_SIZE,
    DiscoveryError,
    discover_files,
    discover_folder,
    mime_type_for,
    split_paths,
)


def _names(result) -> list[str]:
    return [p.name for p in result.paths]


def test_discovers_supported_documents_depth_first(docs_tree):
    result = discover_files([str(docs_tree)])
    assert _names(result) == ["a.pdf", "b.docx", "c.pptx"]
    assert result.total_size == sum(f.size for f in result.files)
    assert all(p.is_absolute() for p in result.paths)


def test_ignored_directories_excluded_at_every_depth(docs_tree):
    (docs_tree / "nested" / "deep" / ".git").mkdir()
    (docs_tree / "nested" / "deep" / ".git" / "x.pdf").write_bytes(b"%PDF x")
    result = discover_files([str(docs_tree)])
    for path in result.paths:
        rel = path.relative_to(docs_tree)
        assert not set(rel.parts) & IGNORED_NAMES


def test_size_bounds(tmp_path):
    at_limit = tmp_path / "big.pdf"
    with at_limit.open("wb") as f:
        f.truncate(MAX_FILE_SIZE)
    below = tmp_path / "ok.pdf"
    with below.open("wb") as f:
        f.truncate(MAX_FILE_SIZE - 1)
    (tmp_path / "zero.pdf").write_bytes(b"")

    result = discover_folder(tmp_path)
    assert _names(result) == ["ok.pdf"]
    assert result.total_size == MAX_FILE_SIZE - 1


def test_mime_type_must_be_supported_even_when_extension_allowed(docs_tree):
    assert mime_type_for(Path("notes.txt")) == "text/plain"
    result = discover_files([str(docs_tree)], extensions=[".txt", ".pdf"])
    assert "notes.txt" not in _names(result)
    assert _names(result) == ["a.pdf"]


def test_extension_allow_list_narrows_result(docs_tree):
    result = discover_files([str(docs_tree)], extensions=[".docx"])
    assert _names(result) == ["b.docx"]


def test_missing_root_yields_empty_result(tmp_path, docs_tree):
    result = discover_files([str(tmp_path / "nope"), str(docs_tree)])
    assert _names(result) == ["a.pdf", "b.docx", "c.pptx"]


def test_ignored_root_yields_empty_result(docs_tree):
    assert discover_folder(docs_tree / "node_modules").files == []


@pytest.mark.parametrize("folders", [None, [], [""]])
def test_absent_root_is_an_input_error(folders):
    with pytest.raises(DiscoveryError):
        discover_files(folders)


def test_results_concatenate_in_root_order(docs_tree):
    result = discover_files([str(docs_tree / "nested"), str(docs_tree)])
    assert _names(result)[:2] == ["b.docx", "c.pptx"]
    assert len(result.files) == 5


def test_split_paths():
    assert split_paths(" /a, /b ,,") == ["/a", "/b"]
    assert split_paths(None) == []


def test_symlinked_file_is_reported_at_its_walked_path(docs_tree):
    link = docs_tree / "link.pdf"
    link.symlink_to(docs_tree / "node_modules" / "ignored.pdf")

    result = discover_files([str(docs_tree)])

    assert "link.pdf" in _names(result)
    for path in result.paths:
        assert not set(path.relative_to(docs_tree).parts) & IGNORED_NAMES
    assert Path(str(docs_tree.absolute())) / "link.pdf" in result.paths
