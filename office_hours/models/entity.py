from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entity(BaseModel):
    """Base for records kept in the document store.

    Attributes are snake_case in Python and camelCase in stored documents.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]):
        return cls.model_validate(document)
