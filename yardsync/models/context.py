from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(UTC)


class OperatorContext(BaseModel):
    """Who is running an export or import; stamped into manifests and audit."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    user_id: str
    user_name: str


SYSTEM_OPERATOR = OperatorContext(user_id="system", user_name="System")


__all__ = ["OperatorContext", "SYSTEM_OPERATOR", "utc_now"]  # noqa: RUF022
