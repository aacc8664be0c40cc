from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ParcelData(BaseModel):
    """Fields commonly sent when announcing a parcel.

    Nothing here is enforced, Sendcloud validates the parcel itself. Only
    fields the caller actually sent are forwarded.
    """

    model_config = ConfigDict(extra="allow")

    name: Any = None
    company_name: Any = None
    address: Any = None
    house_number: Any = None
    city: Any = None
    postal_code: Any = None
    country: Any = None
    email: Any = None
    telephone: Any = None
    weight: Any = None  # kilograms, Sendcloud accepts "1.200" or 1.2
    order_number: Any = None
    shipment: Optional[Dict[str, Any]] = None  # {"id": <shipping method id>}
    request_label: Any = None
    parcel_items: Optional[List[Any]] = None


class CreateParcelRequest(BaseModel):
    parcel: ParcelData

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)
