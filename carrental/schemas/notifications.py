from pydantic import BaseModel
from typing import Optional


class NotificationRequest(BaseModel):
    message: Optional[str] = None


class NotificationOut(BaseModel):
    success: bool = True
    message_id: int
