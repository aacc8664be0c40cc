from .shipping_controller import (
    cancel_parcel,
    create_parcel,
    get_label,
    get_parcel,
    get_shipping_methods,
)
from .webhook_controller import (
    SendcloudWebhookReconciler,
    get_webhook_reconciler,
    process_webhook_request,
)
