import os


def get_optional_seconds(name):
    value = os.getenv(name)
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {value!r}") from None
    if seconds <= 0:
        raise ValueError(f"{name} must be greater than zero, got {value!r}")
    return seconds


SENDCLOUD_PUBLIC_KEY = os.getenv("SENDCLOUD_PUBLIC_KEY")
SENDCLOUD_SECRET_KEY = os.getenv("SENDCLOUD_SECRET_KEY")
SENDCLOUD_BASE_URL = os.getenv(
    "SENDCLOUD_BASE_URL", "https://panel.sendcloud.sc/api/v2"
)

# Request timeout in seconds, unset means the transport default
SENDCLOUD_TIMEOUT = get_optional_seconds("SENDCLOUD_TIMEOUT")

# Sendcloud signs webhooks with the integration secret key
SENDCLOUD_VERIFY_WEBHOOKS = os.getenv("SENDCLOUD_VERIFY_WEBHOOKS", "false").lower() in (
    "1",
    "true",
    "yes",
)

# "http" or "rabbitmq"
FULFILLMENT_SINK = os.getenv("FULFILLMENT_SINK", "").lower()

FULFILLMENT_SERVICE_URL = os.environ.get("FULFILLMENT_SERVICE_URL")
FULFILLMENT_SECRET_KEY = os.environ.get("FULFILLMENT_SECRET_KEY", None)

RABBIT_URL = (
    "amqp://"
    + os.getenv("RABBITMQ_USER", "guest")
    + ":"
    + os.getenv("RABBITMQ_PASSWORD", "guest")
    + "@"
    + os.getenv("RABBITMQ_HOST", "localhost")
    + ":"
    + os.getenv("RABBITMQ_PORT", "5672")
)

FULFILLMENT_EXCHANGE_NAME = os.getenv("FULFILLMENT_EXCHANGE_NAME", "fulfillment.exchange")
FULFILLMENT_QUEUE_NAME = os.getenv("FULFILLMENT_QUEUE_NAME", "fulfillment.status")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
