"""Tag aggregate. Names are unique ignoring case; storage enforces it."""

from datetime import datetime

from pydantic import Field, field_validator

from ...shared.base import AggregateRoot
from ...shared.exceptions import ValidationError
from ...shared.value_objects import Color, TagId
from ..events import TagCreated, TagDeleted, TagRecolored, TagRenamed
from ..value_objects import TAG_NAME_MAX_LENGTH

DEFAULT_COLOR = "#808080"


def _clean_name(name: str) -> str:
    cleaned = name.strip() if isinstance(name, str) else ""
    if not cleaned:
        raise ValidationError("name", name, "Tag name cannot be empty")
    if len(cleaned) > TAG_NAME_MAX_LENGTH:
        raise ValidationError(
            "name", name, f"Tag name cannot exceed {TAG_NAME_MAX_LENGTH} characters"
        )
    return cleaned


class Tag(AggregateRoot):
    id: TagId
    name: str = Field(min_length=1, max_length=TAG_NAME_MAX_LENGTH)
    color: Color

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def create(
        cls,
        tag_id: TagId,
        name: str,
        created_at: datetime,
        color: Color | None = None,
    ) -> "Tag":
        tag = cls(
            id=tag_id,
            name=_clean_name(name),
            color=color or Color.of(DEFAULT_COLOR),
            created_at=created_at,
        )
        tag._record(
            TagCreated(
                aggregate_id=str(tag.id),
                occurred_at=created_at,
                tag_name=tag.name,
                color=tag.color.value,
            )
        )
        return tag

    @property
    def unique_name(self) -> str:
        return self.name.casefold()

    def rename(self, new_name: str, at: datetime) -> bool:
        cleaned = _clean_name(new_name)
        if cleaned == self.name:
            return False
        previous = self.name
        self.name = cleaned
        self.mark_updated(at)
        self._record(
            TagRenamed(
                aggregate_id=str(self.id),
                occurred_at=at,
                previous_name=previous,
                new_name=cleaned,
            )
        )
        return True

    def recolor(self, color: Color, at: datetime) -> bool:
        if color == self.color:
            return False
        previous = self.color
        self.color = color
        self.mark_updated(at)
        self._record(
            TagRecolored(
                aggregate_id=str(self.id),
                occurred_at=at,
                previous_color=previous.value,
                new_color=color.value,
            )
        )
        return True

    def delete(self, at: datetime) -> None:
        """Record the deletion; the caller removes the tag from storage."""
        self._record(TagDeleted(aggregate_id=str(self.id), occurred_at=at, tag_name=self.name))
