import base64
import json
import logging as log
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import requests
from starlette.concurrency import run_in_threadpool

from config.app_vars import (
    SENDCLOUD_BASE_URL,
    SENDCLOUD_PUBLIC_KEY,
    SENDCLOUD_SECRET_KEY,
    SENDCLOUD_TIMEOUT,
)
from utils.exceptions import PARCEL_NOT_FOUND_MESSAGE, InvalidDataError


class SendcloudClient:
    """Client for the Sendcloud v2 REST API.

    Every failure, whether reported by Sendcloud or raised by the transport,
    reaches the caller as an ``InvalidDataError`` so that one except clause
    is enough on the fulfillment side. The instance is read-only after
    construction and safe to share between concurrent requests.

    Documentation: https://api.sendcloud.dev/docs/sendcloud-public-api/
    """

    def __init__(
        self,
        public_key: Optional[str],
        secret_key: Optional[str],
        base_url: str = SENDCLOUD_BASE_URL,
        timeout: Optional[float] = SENDCLOUD_TIMEOUT,
    ):
        if not public_key or not secret_key:
            raise InvalidDataError("Sendcloud public_key and secret_key are required")

        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._auth = base64.b64encode(
            f"{public_key}:{secret_key}".encode("utf-8")
        ).decode("utf-8")

        log.debug("[SendcloudClient] Initialized")

    @property
    def auth_token(self) -> str:
        return self._auth

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _send_request(
        self,
        endpoint: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            log.info(f"[SendcloudClient] Sending {method} request to {endpoint}")

            request_headers = {
                "Authorization": f"Basic {self._auth}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
            request_headers.update(headers or {})
            body = json.dumps(payload) if payload is not None else None

            # requests blocks, keep it off the event loop
            response = await run_in_threadpool(
                requests.request,
                method,
                f"{self._base_url}{endpoint}",
                headers=request_headers,
                data=body,
                timeout=self._timeout,
            )

            content_type = response.headers.get("Content-Type", "")
            if "application/json" in content_type:
                data = response.json()
            else:
                data = response.text

            if "/cancel" in endpoint and response.status_code == 404:
                log.info(
                    f"[SendcloudClient] Parcel not found during cancel operation: {data}"
                )
                raise InvalidDataError(PARCEL_NOT_FOUND_MESSAGE)

            if not 200 <= response.status_code < 300:
                log.error(
                    f"[SendcloudClient] API Error ({response.status_code}): {data}"
                )
                raise InvalidDataError(self._error_message(data, response.reason))

            log.info(f"[SendcloudClient] Successfully received response from {endpoint}")
            return data

        except InvalidDataError:
            raise
        except Exception as e:
            log.error(f"[SendcloudClient] Request Error: {e}", exc_info=True)
            raise InvalidDataError(f"Error contacting Sendcloud API: {e}") from e

    @staticmethod
    def _error_message(data: Any, reason: Optional[str]) -> str:
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return error["message"]

            errors = data.get("errors")
            if isinstance(errors, list) and errors:
                first = errors[0]
                if isinstance(first, dict) and first.get("message"):
                    return first["message"]
                if isinstance(first, str) and first:
                    return first

        return f"Sendcloud API error: {reason}"

    async def test_connection(self) -> bool:
        try:
            await self.get_shipping_methods()
            log.info("[SendcloudClient] Connection test successful")
            return True
        except Exception as e:
            log.error(f"[SendcloudClient] Connection test failed: {e}")
            return False

    async def get_shipping_methods(
        self, to_country: Optional[str] = None, from_country: Optional[str] = None
    ) -> Dict[str, Any]:
        log.info(
            f"[SendcloudClient] Fetching shipping methods with params: "
            f"to_country={to_country}, from_country={from_country}"
        )

        params: List[Tuple[str, str]] = []
        if to_country:
            params.append(("to_country", to_country))
        if from_country:
            params.append(("from_country", from_country))

        query_string = urlencode(params)
        endpoint = "/shipping_methods" + (f"?{query_string}" if query_string else "")

        return await self._send_request(endpoint)

    async def create_parcel(self, data: Dict[str, Any]) -> Dict[str, Any]:
        log.info(f"[SendcloudClient] Creating parcel with data: {data}")

        return await self._send_request("/parcels", method="POST", payload=data)

    async def get_parcel(self, parcel_id: int) -> Dict[str, Any]:
        log.info(f"[SendcloudClient] Fetching parcel with ID: {parcel_id}")

        response = await self._send_request(f"/parcels/{parcel_id}")
        if not isinstance(response, dict) or "parcel" not in response:
            raise InvalidDataError(
                f"Unexpected Sendcloud response for parcel {parcel_id}"
            )
        return response["parcel"]

    async def cancel_parcel(self, parcel_id: int) -> Dict[str, Any]:
        log.info(f"[SendcloudClient] Cancelling parcel with ID: {parcel_id}")

        return await self._send_request(f"/parcels/{parcel_id}/cancel", method="POST")

    async def get_label(self, parcel_id: int) -> Dict[str, Dict[str, List[str]]]:
        log.info(f"[SendcloudClient] Fetching label for parcel ID: {parcel_id}")

        return await self._send_request(f"/labels/{parcel_id}")


@lru_cache
def get_sendcloud_client() -> SendcloudClient:
    """Process-wide client built from configuration."""
    return SendcloudClient(
        public_key=SENDCLOUD_PUBLIC_KEY,
        secret_key=SENDCLOUD_SECRET_KEY,
    )
