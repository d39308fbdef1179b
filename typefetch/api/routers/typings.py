"""Typings router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from typefetch.api.deps import get_typings_extractor
from typefetch.api.schemas.typings import FileModule, TypingsResponse
from typefetch.engines.typings_extractor import TypingsExtractor
from typefetch.exceptions import InputError

router = APIRouter()

# Results for a pinned name@version never change.
CACHE_CONTROL = "max-age=31536000"


def _single_specifier(values: list[str] | None) -> str:
    if not values or not values[0].strip():
        raise InputError("Please provide a dependency")
    if len(values) > 1:
        raise InputError("Dependency should not be an array")
    return values[0].strip()


@router.get(
    "",
    response_model=TypingsResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
)
async def get_typings(
    response: Response,
    dep_query: list[str] | None = Query(None, alias="depQuery"),
    extractor: TypingsExtractor = Depends(get_typings_extractor),
) -> TypingsResponse:
    specifier = _single_specifier(dep_query)
    result = await extractor.extract(specifier)
    response.headers["Cache-Control"] = CACHE_CONTROL
    return TypingsResponse(
        files={path: FileModule(module=rec.content) for path, rec in result.files.items()},
        dropped_file_count=result.dropped_file_count,
    )
