import json
import logging as log
from typing import Any, Dict

from kombu import Connection, Exchange, Producer, Queue
from starlette.concurrency import run_in_threadpool

from config.app_vars import FULFILLMENT_EXCHANGE_NAME, FULFILLMENT_QUEUE_NAME, RABBIT_URL
from utils.fulfillment import prepare_status_payload

FULFILLMENT_STATUS_ROUTING_KEY = "fulfillment.status"
FULFILLMENT_STATUS_DL_QUEUE = "fulfillment.status.deadletter"

fulfillment_exchange = Exchange(FULFILLMENT_EXCHANGE_NAME, type="direct", durable=True)

# Rejected or expired updates are rerouted here through the same exchange
fulfillment_dl_queue = Queue(
    FULFILLMENT_STATUS_DL_QUEUE,
    exchange=fulfillment_exchange,
    routing_key=FULFILLMENT_STATUS_DL_QUEUE,
    durable=True,
)

fulfillment_queue = Queue(
    FULFILLMENT_QUEUE_NAME,
    exchange=fulfillment_exchange,
    routing_key=FULFILLMENT_STATUS_ROUTING_KEY,
    durable=True,
    queue_arguments={
        "x-dead-letter-exchange": FULFILLMENT_EXCHANGE_NAME,
        "x-dead-letter-routing-key": FULFILLMENT_STATUS_DL_QUEUE,
    },
)

FULFILLMENT_DECLARATIONS = [fulfillment_exchange, fulfillment_dl_queue, fulfillment_queue]


def publish_status_in_queue(payload: Dict[str, Any], url: str = RABBIT_URL) -> None:
    """Publish one status update as a persistent JSON message.

    The exchange, the status queue and its dead-letter queue are declared on
    every publish so a fresh broker needs no setup. Broker errors are logged
    and re-raised for the caller to report.
    """
    try:
        with Connection(url) as conn:
            Producer(conn).publish(
                json.dumps(payload),
                exchange=fulfillment_exchange,
                routing_key=FULFILLMENT_STATUS_ROUTING_KEY,
                content_type="application/json",
                delivery_mode=2,
                declare=FULFILLMENT_DECLARATIONS,
                retry=True,
            )
    except Exception as e:
        log.error(
            f"Failed to publish status of parcel {payload.get('parcel_id')} to RabbitMQ: {e}",
            exc_info=True,
        )
        raise

    log.info(f"Fulfillment status of parcel {payload.get('parcel_id')} published to RabbitMQ")


class FulfillmentStatusPublisher:
    """Fulfillment status sink backed by the fulfillment exchange."""

    def __init__(self, url: str = RABBIT_URL):
        self.url = url

    async def update_fulfillment_status(
        self, parcel_id: int, tracking_number: str, status: str
    ) -> None:
        payload = prepare_status_payload(parcel_id, tracking_number, status)
        await run_in_threadpool(publish_status_in_queue, payload, self.url)
