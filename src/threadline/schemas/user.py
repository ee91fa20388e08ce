# src/threadline/schemas/user.py
"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Local mirror of the caller's identity."""

    id: str
    email: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
