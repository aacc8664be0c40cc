from fastapi import APIRouter, Depends, Request

from controllers import (
    SendcloudWebhookReconciler,
    get_webhook_reconciler,
    process_webhook_request,
)

# Sendcloud cannot present credentials, so no auth dependency on this router
router = APIRouter(
    prefix="/webhooks",
    tags=["webhook"],
    responses={404: {"description": "Not found"}},
)


@router.post("/sendcloud", tags=["webhook"])
async def handle_sendcloud_webhook(
    req: Request,
    reconciler: SendcloudWebhookReconciler = Depends(get_webhook_reconciler),
):
    return await process_webhook_request(req, reconciler)


webhook_router = router
