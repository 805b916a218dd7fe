"""File operation routes: move, copy, mkdir, rename, write, search, stars."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from beamshare.api.deps import get_file_service
from beamshare.schemas.files import (
    MkdirRequest,
    RenameRequest,
    SearchResponse,
    StarredItem,
    StarredList,
    StarRequest,
    TransferRequest,
    WriteRequest,
)
from beamshare.services.file_service import FileService

router = APIRouter()


@router.post("/move")
async def move_file(body: TransferRequest, files: FileService = Depends(get_file_service)):
    await files.move(body.source_path, body.target_path)
    return {"message": "File moved successfully", "from": body.source_path, "to": body.target_path}


@router.post("/copy")
async def copy_file(body: TransferRequest, files: FileService = Depends(get_file_service)):
    await files.copy(body.source_path, body.target_path)
    return {"message": "File copied successfully", "from": body.source_path, "to": body.target_path}


@router.post("/mkdir")
async def make_directory(body: MkdirRequest, files: FileService = Depends(get_file_service)):
    await files.mkdir(body.dir_path)
    return {"message": "Directory created successfully", "path": body.dir_path}


@router.post("/rename")
async def rename_entry(body: RenameRequest, files: FileService = Depends(get_file_service)):
    new_path = await files.rename(body.old_path, body.new_name)
    return {"message": "Renamed successfully", "oldPath": body.old_path, "newPath": new_path}


@router.post("/write")
async def write_file(body: WriteRequest, files: FileService = Depends(get_file_service)):
    await files.write(body.file_path, body.content)
    return {"message": "File written successfully", "filePath": body.file_path}


@router.get("/search", response_model=SearchResponse)
async def search(
    q: str | None = None,
    path: str | None = None,
    files: FileService = Depends(get_file_service),
):
    """Case-insensitive name search below ``path`` (default: the shared root)."""
    results = await files.search(q, path)
    return SearchResponse(query=q, path=path or "", results=results, count=len(results))


@router.post("/star")
async def star_file(body: StarRequest, files: FileService = Depends(get_file_service)):
    """Star or unstar; without ``starred`` the current state is toggled."""
    starred = await files.set_star(body.file_path, body.starred)
    return {
        "message": "File starred" if starred else "File unstarred",
        "filePath": body.file_path,
        "starred": starred,
    }


@router.get("/starred", response_model=StarredList)
async def starred_files(files: FileService = Depends(get_file_service)):
    rows = await files.list_starred()
    return StarredList(starred=[
        StarredItem(id=row.id, file_path=row.file_path, created_at=row.created_at)
        for row in rows
    ])
