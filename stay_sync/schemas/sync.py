from typing import Optional

from pydantic import BaseModel, Field


class CalendarSettingsPayload(BaseModel):
    """
    Schema for the remote calendar target. Unset fields disable syncing.
    """

    calendar_id: Optional[str] = Field(None, description="Google calendar id")
    credentials_path: Optional[str] = Field(
        None, description="Path to the OAuth client secrets JSON"
    )
