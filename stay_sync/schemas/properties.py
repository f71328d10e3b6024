from typing import Optional

from pydantic import BaseModel, Field


class PropertyCreatePayload(BaseModel):
    """
    Schema for registering a rental property.
    """

    name: str = Field(..., description="Display name of the property")
    url: Optional[str] = Field(None, description="Public listing URL (optional)")
