"""User profile model - only the fields the scheduler needs."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Row from the ``profiles`` table."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="User ID (auth user id)")
    timezone: Optional[str] = Field(None, description="IANA zone name, e.g. America/Sao_Paulo")
