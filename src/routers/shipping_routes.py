from typing import Optional

from fastapi import APIRouter, Depends

from controllers import (
    cancel_parcel,
    create_parcel,
    get_label,
    get_parcel,
    get_shipping_methods,
)
from serializers import CreateParcelRequest
from utils.sendcloud import SendcloudClient, get_sendcloud_client

router = APIRouter(
    prefix="/sendcloud",
    tags=["sendcloud"],
    responses={404: {"description": "Not found"}},
)


@router.get("/shipping-methods", tags=["sendcloud"])
async def handle_get_shipping_methods(
    to_country: Optional[str] = None,
    from_country: Optional[str] = None,
    client: SendcloudClient = Depends(get_sendcloud_client),
):
    return await get_shipping_methods(client, to_country, from_country)


@router.post("/parcels", tags=["sendcloud"])
async def handle_create_parcel(
    payload: CreateParcelRequest,
    client: SendcloudClient = Depends(get_sendcloud_client),
):
    return await create_parcel(client, payload)


@router.get("/parcels/{parcel_id}", tags=["sendcloud"])
async def handle_get_parcel(
    parcel_id: int, client: SendcloudClient = Depends(get_sendcloud_client)
):
    return await get_parcel(client, parcel_id)


@router.post("/parcels/{parcel_id}/cancel", tags=["sendcloud"])
async def handle_cancel_parcel(
    parcel_id: int, client: SendcloudClient = Depends(get_sendcloud_client)
):
    return await cancel_parcel(client, parcel_id)


@router.get("/labels/{parcel_id}", tags=["sendcloud"])
async def handle_get_label(
    parcel_id: int, client: SendcloudClient = Depends(get_sendcloud_client)
):
    return await get_label(client, parcel_id)


shipping_router = router
