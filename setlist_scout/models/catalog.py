"""Catalog (music streaming) result models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CatalogImage(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    url: str
    height: int | None = None
    width: int | None = None


class CatalogArtist(BaseModel):
    """An artist returned by a catalog artist search."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    name: str
    id: str
    url: str = ""
    image: CatalogImage | None = None


class CatalogTrack(BaseModel):
    """The single best track picked from a catalog track search."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    name: str
    artist_name: str | None = None
    album_name: str | None = None
    album_type: str | None = None
    release_date: str | None = None
    uri: str | None = None
    image_small: str | None = None
    image_medium: str | None = None
