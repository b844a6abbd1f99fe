from __future__ import annotations

from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OrderBy(BaseModel):
    field: str
    direction: Literal["asc", "desc"] = "asc"


class QueryFilter(BaseModel):
    """Equality filter over stored records.

    A list value in ``where`` matches any of its members.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    where: dict[str, Any] = Field(default_factory=dict)
    order_by: OrderBy | None = None
    limit: int | None = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)


@runtime_checkable
class EntityStore(Protocol):
    """Named collections of JSON-shaped records keyed by ``id``."""

    async def get_all(self, collection: str) -> list[dict[str, Any]]: ...

    async def get_by_id(self, collection: str, record_id: str) -> dict[str, Any] | None: ...

    async def save(self, collection: str, record: dict[str, Any]) -> None: ...

    async def delete(self, collection: str, record_id: str) -> None: ...

    async def query(self, collection: str, query: QueryFilter) -> list[dict[str, Any]]: ...

    async def count(self, collection: str, query: QueryFilter | None = None) -> int: ...


__all__ = ["EntityStore", "OrderBy", "QueryFilter"]
