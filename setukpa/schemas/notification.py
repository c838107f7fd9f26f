# setukpa/schemas/notification.py
from pydantic import BaseModel
from datetime import datetime


class NotificationPublic(BaseModel):
    id: int
    type: str
    title: str
    message: str
    related_id: int | None = None
    is_read: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
