"""
Release index data models.

Pydantic models for the subset of the GitHub Releases payload the
orchestrator consumes. Field aliases follow the API's JSON names.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class Asset(BaseModel):
    """A single downloadable file attached to a release."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1, description="Asset file name")
    download_url: str = Field(
        ..., alias="browser_download_url", description="Direct download URL"
    )
    size: Optional[int] = Field(default=None, description="Advertised size in bytes")


class Release(BaseModel):
    """A tagged release and its assets, in index order."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    tag: str = Field(..., alias="tag_name", min_length=1, description="Release tag")
    assets: List[Asset] = Field(default_factory=list)


ReleaseList = TypeAdapter(List[Release])
