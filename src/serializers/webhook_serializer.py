from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class WebhookParcel(BaseModel):
    # Everything apart from the id is opaque until the action is known
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    tracking_number: Any = None
    status: Any = None


class SendcloudWebhook(BaseModel):
    # Sendcloud adds fields freely, only action and parcel.id are relied upon
    model_config = ConfigDict(extra="allow")

    action: Optional[str] = None
    timestamp: Any = None
    parcel: Optional[WebhookParcel] = None


class ParcelStatusUpdate(BaseModel):
    parcel_id: int
    tracking_number: str = ""
    status_message: str


class WebhookAck(BaseModel):
    success: bool
    message: str
