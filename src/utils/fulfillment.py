import logging as log
from functools import lru_cache
from typing import Any, Dict, Optional, Protocol

import requests
from starlette.concurrency import run_in_threadpool

from config.app_vars import (
    FULFILLMENT_SECRET_KEY,
    FULFILLMENT_SERVICE_URL,
    FULFILLMENT_SINK,
)
from utils.exceptions import InvalidDataError


class FulfillmentStatusSink(Protocol):
    """Anything that can record a parcel status change on the fulfillment side."""

    async def update_fulfillment_status(
        self, parcel_id: int, tracking_number: str, status: str
    ) -> None: ...


def prepare_status_payload(
    parcel_id: int, tracking_number: str, status: str
) -> Dict[str, Any]:
    return {
        "provider": "sendcloud",
        "parcel_id": parcel_id,
        "tracking_number": tracking_number,
        "status": status,
    }


class FulfillmentServiceClient:
    """Pushes status updates to the fulfillment service over HTTP."""

    def __init__(self, base_url: str, secret_key: Optional[str] = None):
        if not base_url:
            raise InvalidDataError("Fulfillment service URL is required")
        self.url = base_url.rstrip("/") + "/api/v1/fulfillments/status/"
        self.secret_key = secret_key

    async def update_fulfillment_status(
        self, parcel_id: int, tracking_number: str, status: str
    ) -> None:
        payload = prepare_status_payload(parcel_id, tracking_number, status)
        headers = {"Content-Type": "application/json"}
        if self.secret_key:
            headers["secret-key"] = self.secret_key

        log.info(f"Sending fulfillment status update to fulfillment service: {payload}")
        try:
            req = await run_in_threadpool(
                requests.post, self.url, json=payload, headers=headers
            )
        except requests.RequestException as e:
            raise InvalidDataError(f"Error contacting fulfillment service: {e}") from e

        if not 200 <= int(req.status_code) < 300:
            log.error(
                f"Failed to update fulfillment status for parcel {parcel_id}: "
                f"{req.status_code} {req.content}"
            )
            raise InvalidDataError(
                f"Fulfillment service rejected status update ({req.status_code})"
            )

        log.info(f"Fulfillment service response: {req.status_code}")


def build_fulfillment_sink(kind: str = FULFILLMENT_SINK) -> Optional[FulfillmentStatusSink]:
    """Create the sink selected by FULFILLMENT_SINK, or None if there is none."""
    if kind == "http":
        if not FULFILLMENT_SERVICE_URL:
            log.error("FULFILLMENT_SINK is http but FULFILLMENT_SERVICE_URL is not set")
            return None
        return FulfillmentServiceClient(FULFILLMENT_SERVICE_URL, FULFILLMENT_SECRET_KEY)

    if kind == "rabbitmq":
        from publishers import FulfillmentStatusPublisher

        return FulfillmentStatusPublisher()

    log.error(f"No fulfillment status sink configured (FULFILLMENT_SINK={kind!r})")
    return None


@lru_cache
def get_fulfillment_sink() -> Optional[FulfillmentStatusSink]:
    return build_fulfillment_sink()
