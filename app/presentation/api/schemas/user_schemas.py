"""Pydantic schemas for the user contact sync endpoint."""

from typing import Optional

from pydantic import ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.presentation.api.schemas.subscription_schemas import CamelModel, RequestModel


class UserContactRequest(RequestModel):
    email: Optional[EmailStr] = None
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class UserContactResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    email: Optional[str]
    first_name: str
    last_name: str
