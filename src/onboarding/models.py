"""
Wire models for the onboarding service.

Contains Pydantic models for the entities sent to the import endpoint and the
envelopes returned by the service. Python attribute names are snake_case; the
aliases are the PascalCase / camelCase names used on the wire.

Entity Types:
    - DynamicEntity: keyed record imported into a data source
    - DynamicProperty: language-qualified attribute of an entity
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DynamicProperty(BaseModel):
    """Named, optionally language-qualified attribute of an entity."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, alias="Id")
    language: str | None = Field(default=None, alias="Language")
    value: Any = Field(default=None, alias="Value")

    @property
    def identity(self) -> tuple[str | None, str | None]:
        """(id, language) pair that must be unique within one entity."""
        return self.id, self.language


class DynamicEntity(BaseModel):
    """
    Keyed record imported into a data source.

    properties may be None when built by the caller; validation replaces it
    with an empty list before the batch is sent.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str | None = Field(default=None, alias="Key")
    properties: list[DynamicProperty] | None = Field(default=None, alias="Properties")


class ImportBatchResult(BaseModel):
    """
    Batch result returned by the import endpoint.

    The structure is owned by the service; every field it returns is kept
    as an extra attribute and is available through model_dump().
    """

    model_config = ConfigDict(extra="allow")


class TokenResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")


class TokenResponse(BaseModel):
    """Authentication envelope: {"result": {"accessToken": "..."}}."""

    result: TokenResult


class ImportOutcome(BaseModel):
    """HTTP status, reason phrase and deserialized batch result of one import call."""

    status_code: int
    message: str | None = None
    result: ImportBatchResult | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


def serialize_entities(entities: list[DynamicEntity]) -> dict[str, Any]:
    """Build the import request body: {"Entities": [...]}."""
    return {
        "Entities": [
            entity.model_dump(mode="json", by_alias=True) for entity in entities
        ]
    }


__all__ = [
    "DynamicEntity",
    "DynamicProperty",
    "ImportBatchResult",
    "ImportOutcome",
    "TokenResponse",
    "TokenResult",
    "serialize_entities",
]
