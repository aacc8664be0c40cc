import json
import logging as log
from http import HTTPStatus
from typing import Optional

from fastapi import Request
from fastapi.responses import ORJSONResponse
from pydantic import ValidationError

from config.app_vars import SENDCLOUD_SECRET_KEY, SENDCLOUD_VERIFY_WEBHOOKS
from serializers import ParcelStatusUpdate, SendcloudWebhook, WebhookAck
from utils.exceptions import InvalidDataError
from utils.fulfillment import FulfillmentStatusSink, get_fulfillment_sink
from utils.helpers import verify_webhook_signature

PARCEL_STATUS_CHANGED = "parcel_status_changed"


class SendcloudWebhookReconciler:
    """
    Turns Sendcloud webhook deliveries into fulfillment status updates.

    The outcome is always reported through a WebhookAck and never raised, so
    the HTTP layer can answer 200 for every delivery. Sendcloud retries
    anything else, and retrying the same payload cannot fix it.

    Documentation: https://api.sendcloud.dev/docs/sendcloud-public-api/webhooks
    """

    def __init__(
        self,
        sink: Optional[FulfillmentStatusSink],
        signing_secret: Optional[str] = None,
    ):
        self.sink = sink
        self.signing_secret = signing_secret

    async def handle(self, body: bytes, signature: Optional[str] = None) -> WebhookAck:
        try:
            if self.signing_secret is not None and not verify_webhook_signature(
                body, signature, self.signing_secret
            ):
                raise InvalidDataError("Invalid webhook signature")

            webhook = self.parse(body)
            log.info(f"[SendcloudWebhook] Received webhook: {webhook.model_dump()}")

            if not webhook.action:
                raise InvalidDataError("Invalid webhook data: missing action")

            if webhook.parcel is None or not webhook.parcel.id:
                raise InvalidDataError("Invalid webhook data: missing parcel information")

            # Label prints, refunds and the like are acknowledged without work
            if webhook.action != PARCEL_STATUS_CHANGED:
                log.info(f"[SendcloudWebhook] Ignoring webhook action: {webhook.action}")
                return WebhookAck(success=True, message=f"Action {webhook.action} ignored")

            update = self.extract_status_update(webhook)
            log.info(
                f"[SendcloudWebhook] Processing status update for parcel {update.parcel_id}, "
                f"tracking {update.tracking_number}, status: {update.status_message}"
            )

            if self.sink is None:
                raise InvalidDataError("Fulfillment status sink is not configured")

            await self.sink.update_fulfillment_status(
                update.parcel_id, update.tracking_number, update.status_message
            )

            log.info(
                f"[SendcloudWebhook] Successfully processed webhook for parcel {update.parcel_id}"
            )
            return WebhookAck(
                success=True,
                message=(
                    f"Successfully updated status for parcel {update.parcel_id} "
                    f"to {update.status_message}"
                ),
            )

        except Exception as e:
            message = e.message if isinstance(e, InvalidDataError) else str(e)
            log.error(
                f"[SendcloudWebhook] Error processing webhook: {message}",
                exc_info=not isinstance(e, InvalidDataError),
            )
            return WebhookAck(success=False, message=f"Error processing webhook: {message}")

    @staticmethod
    def parse(body: bytes) -> SendcloudWebhook:
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidDataError(f"Invalid webhook data: malformed JSON ({e})") from e

        if not isinstance(data, dict):
            raise InvalidDataError("Invalid webhook data: expected a JSON object")

        try:
            return SendcloudWebhook.model_validate(data)
        except ValidationError as e:
            raise InvalidDataError(f"Invalid webhook data: {e}") from e

    @staticmethod
    def extract_status_update(webhook: SendcloudWebhook) -> ParcelStatusUpdate:
        parcel = webhook.parcel
        status = parcel.status if isinstance(parcel.status, dict) else {}
        if status.get("message") is None:
            raise InvalidDataError("Invalid webhook data: missing parcel status")

        return ParcelStatusUpdate(
            parcel_id=parcel.id,
            tracking_number=str(parcel.tracking_number or ""),
            status_message=str(status["message"]),
        )


def get_webhook_reconciler() -> SendcloudWebhookReconciler:
    # An empty secret with verification on rejects every delivery
    signing_secret = (SENDCLOUD_SECRET_KEY or "") if SENDCLOUD_VERIFY_WEBHOOKS else None
    return SendcloudWebhookReconciler(
        sink=get_fulfillment_sink(), signing_secret=signing_secret
    )


async def process_webhook_request(req: Request, reconciler: SendcloudWebhookReconciler):
    body = await req.body()
    ack = await reconciler.handle(body, signature=req.headers.get("Sendcloud-Signature"))
    return ORJSONResponse(content=ack.model_dump(), status_code=HTTPStatus.OK)
