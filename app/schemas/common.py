"""Shared schema configuration and small response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schema exchanged as camelCase JSON, populated by name or from ORM rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PerformedBy(CamelModel):
    """Identity of the admin who triggered an operation."""

    id: str
    email: str | None = None


class FileUploadResponse(CamelModel):
    """Stored file metadata."""

    id: str
    file_name: str
    file_type: str
    file_size: int
    file_url: str
    category: str | None = None
    uploaded_at: datetime


class AddressResponse(CamelModel):
    id: str
    name: str | None = None
    street1: str
    street2: str | None = None
    city: str
    state: str
    zip: str
    county: str | None = None
