# agenda/schemas/base.py
"""Shared base for entities persisted as store documents"""
from __future__ import annotations
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from agenda.core.exceptions import ValidationError

T = TypeVar("T", bound="DocumentModel")


def describe_errors(error: PydanticValidationError) -> list:
    return [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
        for err in error.errors()
    ]


class DocumentModel(BaseModel):
    """
    Entity with camelCase document field names.

    `from_document` fails fast with our ValidationError when a stored or
    submitted document is missing required fields or has malformed values.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: Optional[str] = None

    @classmethod
    def from_document(cls: Type[T], doc: Dict[str, Any]) -> T:
        try:
            return cls.model_validate(doc)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {cls.__name__} document",
                {"id": (doc or {}).get("id"), "errors": describe_errors(e)}
            ) from e

    def to_document(self) -> Dict[str, Any]:
        """Persisted shape: camelCase keys, JSON-safe values, no id"""
        return self.model_dump(by_alias=True, mode="json", exclude={"id"})
