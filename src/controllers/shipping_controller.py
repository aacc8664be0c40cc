from http import HTTPStatus
from typing import Optional

from fastapi.responses import ORJSONResponse

from serializers import CreateParcelRequest
from utils.exceptions import PARCEL_NOT_FOUND_MESSAGE, InvalidDataError
from utils.sendcloud import SendcloudClient


def _error_response(error: InvalidDataError, status_code=HTTPStatus.BAD_REQUEST):
    return ORJSONResponse(content={"message": error.message}, status_code=status_code)


async def get_shipping_methods(
    client: SendcloudClient,
    to_country: Optional[str] = None,
    from_country: Optional[str] = None,
):
    try:
        res = await client.get_shipping_methods(
            to_country=to_country, from_country=from_country
        )
        return ORJSONResponse(content=res)

    except InvalidDataError as e:
        return _error_response(e)


async def create_parcel(client: SendcloudClient, payload: CreateParcelRequest):
    try:
        res = await client.create_parcel(payload.to_payload())
        return ORJSONResponse(content=res, status_code=HTTPStatus.CREATED)

    except InvalidDataError as e:
        return _error_response(e)


async def get_parcel(client: SendcloudClient, parcel_id: int):
    try:
        res = await client.get_parcel(parcel_id)
        return ORJSONResponse(content={"parcel": res})

    except InvalidDataError as e:
        return _error_response(e)


async def cancel_parcel(client: SendcloudClient, parcel_id: int):
    try:
        res = await client.cancel_parcel(parcel_id)
        return ORJSONResponse(content=res)

    except InvalidDataError as e:
        # Parcel already gone on the Sendcloud side
        if e.message == PARCEL_NOT_FOUND_MESSAGE:
            return _error_response(e, status_code=HTTPStatus.NOT_FOUND)
        return _error_response(e)


async def get_label(client: SendcloudClient, parcel_id: int):
    try:
        res = await client.get_label(parcel_id)
        return ORJSONResponse(content=res)

    except InvalidDataError as e:
        return _error_response(e)
