from typing import Literal

from pydantic import BaseModel


class Notification(BaseModel):
    """User-facing message the dashboard renders as a toast."""

    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"
