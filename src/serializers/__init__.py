from .shipping_serializer import CreateParcelRequest, ParcelData
from .webhook_serializer import (
    ParcelStatusUpdate,
    SendcloudWebhook,
    WebhookAck,
    WebhookParcel,
)
