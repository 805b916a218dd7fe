"""Tests for file operations confined to the shared directory."""

import io
import os
from pathlib import Path

import pytest

from beamshare.exceptions import (
    AlreadyExists,
    BadRequest,
    InvalidPath,
    NotFound,
    OperationFailed,
)


def _names(entries):
    return [e.name for e in entries]


# --- browse ---


@pytest.mark.asyncio
async def test_browse_root_lists_children(file_service, shared_dir):
    (shared_dir / "b.txt").write_text("bb")
    (shared_dir / "a").mkdir()

    entries = await file_service.browse("")

    assert _names(entries) == ["a", "b.txt"]
    folder, text = entries
    assert folder.is_dir and folder.path == "a"
    assert not text.is_dir and text.size == "2 B" and text.path == "b.txt"
    assert not text.is_starred


@pytest.mark.asyncio
async def test_browse_subdirectory_paths(file_service, shared_dir):
    (shared_dir / "docs").mkdir()
    (shared_dir / "docs" / "x.md").write_text("# x")

    entries = await file_service.browse("docs")
    assert [e.path for e in entries] == ["docs/x.md"]


@pytest.mark.asyncio
async def test_browse_file_returns_path(file_service, shared_dir):
    (shared_dir / "f.txt").write_text("hello")
    result = await file_service.browse("f.txt")
    assert isinstance(result, Path)
    assert result.read_text() == "hello"


@pytest.mark.asyncio
async def test_browse_missing_directory(file_service):
    with pytest.raises(OperationFailed):
        await file_service.browse("nope")


@pytest.mark.asyncio
async def test_browse_traversal(file_service):
    with pytest.raises(InvalidPath) as exc:
        await file_service.browse("../../etc")
    assert exc.value.message == "Invalid path"


@pytest.mark.asyncio
async def test_browse_marks_starred(file_service, shared_dir):
    (shared_dir / "keep.txt").write_text("k")
    (shared_dir / "skip.txt").write_text("s")
    await file_service.set_star("keep.txt", True)

    entries = {e.name: e for e in await file_service.browse("")}
    assert entries["keep.txt"].is_starred
    assert not entries["skip.txt"].is_starred


# --- transfers ---


@pytest.mark.asyncio
async def test_upload_writes_and_counts(file_service, stats_store, shared_dir):
    await file_service.save_upload("up.bin", io.BytesIO(b"\x00\x01payload"))

    assert (shared_dir / "up.bin").read_bytes() == b"\x00\x01payload"
    assert (await stats_store.get_stats()).uploads == 1


@pytest.mark.asyncio
async def test_upload_overwrites(file_service, shared_dir):
    (shared_dir / "up.txt").write_text("old contents")
    await file_service.save_upload("up.txt", io.BytesIO(b"new"))
    assert (shared_dir / "up.txt").read_bytes() == b"new"


@pytest.mark.asyncio
async def test_upload_requires_name(file_service, stats_store):
    with pytest.raises(BadRequest):
        await file_service.save_upload("", io.BytesIO(b"x"))
    assert (await stats_store.get_stats()).uploads == 0


@pytest.mark.asyncio
async def test_upload_traversal_rejected(file_service, stats_store, tmp_path):
    with pytest.raises(InvalidPath):
        await file_service.save_upload("../escape.txt", io.BytesIO(b"x"))
    assert not (tmp_path / "escape.txt").exists()
    assert (await stats_store.get_stats()).uploads == 0


@pytest.mark.asyncio
async def test_open_download(file_service, shared_dir):
    (shared_dir / "d.txt").write_text("data")
    assert (await file_service.open_download("d.txt")).name == "d.txt"

    with pytest.raises(NotFound):
        await file_service.open_download("missing.txt")
    with pytest.raises(NotFound):
        await file_service.open_download("")  # the root is a directory


# --- move / copy ---


@pytest.mark.asyncio
async def test_move(file_service, shared_dir):
    (shared_dir / "a.txt").write_text("A")
    (shared_dir / "dest").mkdir()

    await file_service.move("a.txt", "dest/a.txt")

    assert not (shared_dir / "a.txt").exists()
    assert (shared_dir / "dest" / "a.txt").read_text() == "A"


@pytest.mark.asyncio
async def test_move_missing_source(file_service):
    with pytest.raises(NotFound):
        await file_service.move("ghost.txt", "other.txt")


@pytest.mark.asyncio
async def test_move_into_missing_parent_fails(file_service, shared_dir):
    (shared_dir / "a.txt").write_text("A")
    with pytest.raises(OperationFailed):
        await file_service.move("a.txt", "no/such/dir/a.txt")
    assert (shared_dir / "a.txt").exists()


@pytest.mark.asyncio
async def test_move_shared_root_rejected(file_service):
    with pytest.raises(InvalidPath):
        await file_service.move("", "elsewhere")


@pytest.mark.asyncio
async def test_copy(file_service, shared_dir):
    (shared_dir / "src.txt").write_text("copy me")
    await file_service.copy("src.txt", "dst.txt")

    assert (shared_dir / "src.txt").read_text() == "copy me"
    assert (shared_dir / "dst.txt").read_text() == "copy me"


@pytest.mark.asyncio
async def test_copy_errors(file_service, shared_dir):
    (shared_dir / "src.txt").write_text("x")

    with pytest.raises(NotFound):
        await file_service.copy("ghost.txt", "dst.txt")
    with pytest.raises(BadRequest):
        await file_service.copy("src.txt", "./src.txt")
    with pytest.raises(OperationFailed):
        await file_service.copy("src.txt", "missing-dir/dst.txt")


@pytest.mark.asyncio
async def test_copy_directory_source(file_service, shared_dir):
    (shared_dir / "folder").mkdir()
    with pytest.raises(BadRequest) as exc:
        await file_service.copy("folder", "folder2")
    assert exc.value.message == "Source is a directory"
    assert not (shared_dir / "folder2").exists()


# --- mkdir / rename / write ---


@pytest.mark.asyncio
async def test_mkdir_creates_parents(file_service, shared_dir):
    await file_service.mkdir("x/y/z")
    assert (shared_dir / "x" / "y" / "z").is_dir()


@pytest.mark.asyncio
async def test_mkdir_twice(file_service):
    await file_service.mkdir("dup")
    with pytest.raises(AlreadyExists):
        await file_service.mkdir("dup")


@pytest.mark.asyncio
async def test_rename_in_place(file_service, shared_dir):
    (shared_dir / "docs").mkdir()
    (shared_dir / "docs" / "old.txt").write_text("o")

    new_path = await file_service.rename("docs/old.txt", "new.txt")

    assert new_path == "docs/new.txt"
    assert (shared_dir / "docs" / "new.txt").read_text() == "o"
    assert not (shared_dir / "docs" / "old.txt").exists()


@pytest.mark.asyncio
async def test_rename_at_root(file_service, shared_dir):
    (shared_dir / "old.txt").write_text("o")
    assert await file_service.rename("old.txt", "new.txt") == "new.txt"


@pytest.mark.asyncio
async def test_rename_errors(file_service, shared_dir):
    (shared_dir / "a.txt").write_text("a")
    (shared_dir / "b.txt").write_text("b")

    with pytest.raises(NotFound):
        await file_service.rename("ghost.txt", "x.txt")
    with pytest.raises(AlreadyExists):
        await file_service.rename("a.txt", "b.txt")
    with pytest.raises(BadRequest):
        await file_service.rename("a.txt", "")
    with pytest.raises(InvalidPath):
        await file_service.rename("a.txt", "../../escape.txt")
    with pytest.raises(InvalidPath):
        await file_service.rename("", "root2")


@pytest.mark.asyncio
async def test_write_creates_parents(file_service, shared_dir):
    await file_service.write("notes/today.md", "héllo")
    assert (shared_dir / "notes" / "today.md").read_bytes() == "héllo".encode("utf-8")


@pytest.mark.asyncio
async def test_write_replaces_content(file_service, shared_dir):
    (shared_dir / "f.txt").write_text("a much longer original body")
    await file_service.write("f.txt", "short")
    assert (shared_dir / "f.txt").read_text() == "short"


@pytest.mark.asyncio
async def test_write_empty_content(file_service, shared_dir):
    await file_service.write("empty.txt", "")
    assert (shared_dir / "empty.txt").read_bytes() == b""


@pytest.mark.asyncio
async def test_write_requires_path(file_service):
    with pytest.raises(BadRequest):
        await file_service.write("", "x")


# --- search ---


@pytest.mark.asyncio
async def test_search_case_insensitive(file_service, shared_dir):
    (shared_dir / "a" / "b").mkdir(parents=True)
    (shared_dir / "a" / "report.txt").write_text("r")
    (shared_dir / "a" / "b" / "Report2.doc").write_text("r2")
    (shared_dir / "a" / "x.txt").write_text("x")

    results = await file_service.search("REPORT")

    assert sorted(r.path for r in results) == ["a/b/Report2.doc", "a/report.txt"]


@pytest.mark.asyncio
async def test_search_under_subpath(file_service, shared_dir):
    (shared_dir / "a" / "b").mkdir(parents=True)
    (shared_dir / "a" / "b" / "Report2.doc").write_text("r2")
    (shared_dir / "report-top.txt").write_text("t")

    results = await file_service.search("report", "a")
    assert [r.path for r in results] == ["a/b/Report2.doc"]


@pytest.mark.asyncio
async def test_search_matches_directories(file_service, shared_dir):
    (shared_dir / "reports").mkdir()
    results = await file_service.search("report")
    assert [(r.name, r.is_dir) for r in results] == [("reports", True)]


@pytest.mark.asyncio
async def test_search_requires_query(file_service):
    with pytest.raises(BadRequest):
        await file_service.search("")


@pytest.mark.asyncio
async def test_search_path_traversal(file_service):
    with pytest.raises(InvalidPath) as exc:
        await file_service.search("x", "../..")
    assert exc.value.message == "Invalid search path"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
@pytest.mark.asyncio
async def test_search_does_not_follow_symlinks(file_service, shared_dir, tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret-report.txt").write_text("s")
    (shared_dir / "link").symlink_to(outside, target_is_directory=True)

    results = await file_service.search("report")
    assert results == []


# --- stars ---


@pytest.mark.asyncio
async def test_set_star_toggles(file_service, shared_dir):
    (shared_dir / "t.txt").write_text("t")

    assert await file_service.set_star("t.txt") is True
    assert await file_service.set_star("t.txt") is False
    assert await file_service.list_starred() == []


@pytest.mark.asyncio
async def test_star_key_is_canonical(file_service, shared_dir):
    (shared_dir / "docs").mkdir()
    (shared_dir / "docs" / "a.txt").write_text("a")

    await file_service.set_star("./docs//a.txt", True)
    await file_service.set_star("/docs/a.txt", True)

    starred = await file_service.list_starred()
    assert [s.file_path for s in starred] == ["docs/a.txt"]


@pytest.mark.asyncio
async def test_star_missing_file(file_service):
    with pytest.raises(NotFound):
        await file_service.set_star("ghost.txt", True)


@pytest.mark.asyncio
async def test_unstar_twice(file_service, shared_dir):
    (shared_dir / "t.txt").write_text("t")
    await file_service.set_star("t.txt", True)
    await file_service.set_star("t.txt", False)
    await file_service.set_star("t.txt", False)
    assert await file_service.list_starred() == []


@pytest.mark.asyncio
async def test_star_traversal_rejected(file_service):
    with pytest.raises(InvalidPath):
        await file_service.set_star("../outside.txt", True)


@pytest.mark.asyncio
async def test_search_paths_under_nested_client_root(file_service, shared_dir):
    (shared_dir / "a" / "b").mkdir(parents=True)
    (shared_dir / "a" / "b" / "notes.txt").write_text("n")

    results = await file_service.search("notes", "/a/")
    assert [r.path for r in results] == ["a/b/notes.txt"]
