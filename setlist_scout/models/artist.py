"""Artist identity models.

An :class:`ArtistRef` is what the client picked from a catalog artist
search; an :class:`IdentityMatch` is what the identity graph says about it.
Both are frozen so they can be shared between pipeline stages safely.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ArtistRef(BaseModel):
    """Caller-supplied artist record from the catalog service.

    Accepts both the catalog's own ``{name, id, url}`` keys and the
    ``{name, catalogId, catalogUrl}`` form.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    name: str = Field(min_length=1)
    catalog_id: str = Field(
        default="",
        validation_alias=AliasChoices("catalogId", "catalog_id", "id"),
    )
    catalog_url: str = Field(
        default="",
        validation_alias=AliasChoices("catalogUrl", "catalog_url", "url"),
    )


class IdentityMatch(BaseModel):
    """Result of reconciling an ArtistRef against the identity graph.

    ``matched`` is True only when a candidate exists AND its name passes the
    loose name-match test against ``ArtistRef.name``.  A False value is a
    routing decision (search the archive by name), not a failure.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    identity_graph_id: str | None = None
    identity_graph_name: str | None = None
    matched: bool = False
