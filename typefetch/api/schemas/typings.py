"""Typings request/response schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FileModule(BaseModel):
    module: str


class TypingsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["ok"] = "ok"
    files: dict[str, FileModule]
    dropped_file_count: int | None = Field(default=None, alias="droppedFileCount")


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    files: dict[str, FileModule] = Field(default_factory=dict)
    error: str
    stack: str
