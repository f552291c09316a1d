"""Base schema configuration."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base schema with common configuration.

    Fields are snake_case in Python and camelCase on the wire; either spelling
    is accepted on input.
    """

    model_config = ConfigDict(
        from_attributes=True,  # Enable ORM mode
        str_strip_whitespace=True,
        validate_assignment=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class IDMixin(BaseModel):
    """Mixin for UUID primary key."""

    id: UUID


class CreatedAtMixin(BaseModel):
    """Mixin for created_at timestamp."""

    created_at: datetime
