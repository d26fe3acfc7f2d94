from pydantic import BaseModel, field_validator
from typing import List, Literal, Optional

class Notification(BaseModel):
    type: Literal["toast", "alert", "alert_dialog"]
    title: str
    message: str
    style: str
    backgroundColor: str
    textColor: str
    borderColor: str
    imageUrl: Optional[str] = None

    @field_validator("imageUrl", mode="before")
    @classmethod
    def image_url_not_null(cls, v):
        # may be omitted, but an explicit null is rejected
        if v is None:
            raise ValueError("imageUrl must be a string when present")
        return v

class NotificationPayload(BaseModel):
    droplertId: str
    websites: List[str]
    notification: Notification

class SubscriptionMessage(BaseModel):
    action: Literal["subscribe"]
    droplertId: str
    websiteUrl: str

class SetApiKeyRequest(BaseModel):
    droplertId: str
    websiteUrl: str
