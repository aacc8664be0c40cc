import hashlib
import hmac
import logging as log
from typing import Optional, Union


def generate_sha256(input_data: Union[bytes, str], secret: str) -> str:
    """
    Generate HMAC-SHA256 signature for the given input and secret.

    :param input_data: The data to be signed.
    :param secret: The secret key used for signing.
    :return: The generated signature in hexadecimal.
    """
    if isinstance(input_data, str):
        input_data = input_data.encode("utf-8")
    h = hmac.new(secret.encode("utf-8"), input_data, hashlib.sha256)
    return h.hexdigest()


def verify_webhook_signature(
    body: bytes, signature: Optional[str], secret: Optional[str]
) -> bool:
    """
    Check the Sendcloud-Signature header of a webhook delivery.

    Sendcloud signs the raw request body with HMAC-SHA256 keyed by the
    integration secret key and sends the hex digest.

    :param body: Raw request body as received.
    :param signature: Value of the Sendcloud-Signature header.
    :param secret: The integration secret key.
    :return: True when the signature matches.
    """
    if not secret:
        log.warning("Webhook signing secret not configured, rejecting webhook")
        return False
    if not signature:
        return False

    expected = generate_sha256(body, secret)
    return hmac.compare_digest(expected, signature.strip().lower())
