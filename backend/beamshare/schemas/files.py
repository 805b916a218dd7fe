"""File schemas: listing entries, operation payloads, starred files."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FileEntry(BaseModel):
    """File metadata for listing and search results."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    size: str
    is_dir: bool = Field(alias="isDir")
    mod_time: str = Field(alias="modTime")
    path: str
    is_starred: bool = Field(default=False, alias="isStarred")


class TransferRequest(BaseModel):
    """Move / copy payload."""
    model_config = ConfigDict(populate_by_name=True)

    source_path: str = Field(alias="sourcePath")
    target_path: str = Field(alias="targetPath")


class MkdirRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dir_path: str = Field(alias="dirPath")


class RenameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_path: str = Field(alias="oldPath")
    new_name: str = Field(alias="newName")


class WriteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(alias="filePath")
    content: str = ""


class StarRequest(BaseModel):
    """``starred`` forces a state; omitted, the star is toggled."""
    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(alias="filePath")
    starred: bool | None = None


class SearchResponse(BaseModel):
    query: str
    path: str
    results: list[FileEntry]
    count: int


class StarredItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    file_path: str = Field(alias="filePath")
    created_at: datetime = Field(alias="createdAt")


class StarredList(BaseModel):
    starred: list[StarredItem]
