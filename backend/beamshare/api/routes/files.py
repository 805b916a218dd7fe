"""File API routes: browse, download, upload."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from beamshare.api.deps import get_file_service, get_stats_store
from beamshare.schemas.files import FileEntry
from beamshare.services.file_service import FileService
from beamshare.services.stats_store import StatsStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/files", response_model=list[FileEntry])
async def list_files(
    path: str | None = None,
    files: FileService = Depends(get_file_service),
):
    """Direct children of a directory, or the raw bytes when ``path`` is a file."""
    result = await files.browse(path)
    if isinstance(result, Path):
        return FileResponse(result)
    return result


@router.get("/download")
async def download_file(
    file: str | None = None,
    files: FileService = Depends(get_file_service),
    stats: StatsStore = Depends(get_stats_store),
):
    """Stream a file as an attachment; counted once the body is fully sent."""
    logger.info("Download request for file: %s", file)
    target = await files.open_download(file)
    return FileResponse(
        target,
        filename=target.name,
        media_type="application/octet-stream",
        background=BackgroundTask(stats.increment_downloads),
    )


@router.post("/upload")
async def upload_file(
    file: UploadFile = File(...),
    files: FileService = Depends(get_file_service),
):
    """Save a multipart upload into the shared directory."""
    logger.info("Upload request received: %s (%s bytes)", file.filename, file.size)
    try:
        await files.save_upload(file.filename, file.file)
    finally:
        await file.close()
    return {"message": "Uploaded", "file": file.filename}
