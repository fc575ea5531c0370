"""Datamodeller för Sendcloud API v2.

Enum-värden och fältnamn följer API:ets JSON-format direkt, så att
to_dict()/to_params() kan skickas utan översättning.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum, IntEnum
from typing import Optional, Union


class FileFormat(Enum):
    PDF = "pdf"
    ZPL = "zpl"
    PNG = "png"


class DocumentType(Enum):
    """Dokumenttyper som kan hämtas för ett anmält paket."""
    LABEL = "label"                            # Etikett för själva paketet
    CP71 = "cp71"                              # Följesedel, internationellt
    CN23 = "cn23"                              # Tulldeklaration, internationellt
    COMMERCIAL_INVOICE = "commercial-invoice"
    CN23_DEFAULT = "cn23-default"              # Sendclouds egen CN23 (referens)


class CustomsShipmentType(IntEnum):
    GIFT = 0
    DOCUMENTS = 1
    COMMERCIAL_GOODS = 2
    COMMERCIAL_SAMPLE = 3
    RETURNED_GOODS = 4


def _plain(value):
    """Gör om enums och nästlade dataklasser till JSON-vänliga värden."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


def _drop_unset(obj) -> dict:
    """Fält i deklarationsordning, utan de som är None."""
    return {
        f.name: _plain(getattr(obj, f.name))
        for f in fields(obj)
        if getattr(obj, f.name) is not None
    }


# ----------------------------------------------------------------------
# Query-parametrar
# ----------------------------------------------------------------------

@dataclass
class ParcelQueryParameters:
    """Filter för GET parcels.

    updated_after: ISO 8601, t.ex. "2018-02-26T11:01:47" eller "2018-02-26".
    ids: kommaseparerad lista, max 100 paket-ID.
    cursor: pagineringstoken från föregående svar.
    """
    parcel_status: Optional[int] = None
    tracking_number: Optional[str] = None
    order_number: Optional[str] = None
    updated_after: Optional[str] = None
    ids: Optional[str] = None
    cursor: Optional[str] = None

    def to_params(self) -> dict:
        return _drop_unset(self)


@dataclass
class ShippingMethodsQueryParameters:
    """Filter för GET shipping_methods.

    sender_address kan vara ett ID eller "all".
    """
    sender_address: Optional[Union[int, str]] = None
    service_point_id: Optional[int] = None
    is_return: Optional[bool] = None

    def to_params(self) -> dict:
        return _drop_unset(self)


@dataclass
class IntegrationShipmentQueryParameters:
    """Filter för GET integrations/{id}/shipments (datum i YYYY-MM-DD)."""
    external_order_ids: Optional[str] = None
    external_shipment_ids: Optional[str] = None
    order_number: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    sender_address: Optional[int] = None

    def to_params(self) -> dict:
        return _drop_unset(self)


# ----------------------------------------------------------------------
# Request-bodies
# ----------------------------------------------------------------------

@dataclass
class ParcelItem:
    description: str = ""
    quantity: int = 1
    weight: str = ""          # kg per artikel, som sträng ("0.500")
    value: Union[float, str] = 0
    hs_code: Optional[str] = None
    origin_country: Optional[str] = None
    sku: Optional[str] = None
    product_id: Optional[str] = None
    properties: Optional[dict[str, str]] = None

    def to_dict(self) -> dict:
        return _drop_unset(self)


@dataclass
class Parcel:
    """Paket att skapa via POST parcels.

    Utanför EU krävs även country_state, customs_invoice_nr,
    customs_shipment_type och parcel_items.
    """
    name: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""
    company_name: Optional[str] = None
    address_2: Optional[str] = None
    house_number: Optional[str] = None
    to_post_number: Optional[str] = None
    country_state: Optional[str] = None
    telephone: Optional[str] = None
    email: Optional[str] = None
    sender_address: Optional[int] = None
    customs_invoice_nr: Optional[str] = None
    customs_shipment_type: Optional[CustomsShipmentType] = None
    external_reference: Optional[str] = None  # Idempotensnyckel
    order_number: Optional[str] = None
    weight: Optional[str] = None
    is_return: Optional[bool] = None
    request_label: Optional[bool] = None
    shipment: Optional[dict] = None           # {"id": <shipping method id>}
    parcel_items: list[ParcelItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = _drop_unset(self)
        if not self.parcel_items:
            data.pop("parcel_items", None)
        return data


@dataclass
class IntegrationShipment:
    """En order/sändning som synkas till en API-integration.

    Unik per (external_order_id, external_shipment_id). external_shipment_id
    får vara None om butiken inte delar upp ordrar i flera sändningar.
    Nullbara fält skickas alltid med, även som null.
    """
    external_order_id: str = ""
    external_shipment_id: Optional[str] = None
    order_number: str = ""
    name: str = ""
    company_name: str = ""
    address: str = ""
    address_2: str = ""
    house_number: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""
    to_state: Optional[str] = None
    telephone: str = ""
    email: str = ""
    to_post_number: str = ""
    to_service_point: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""      # Endast ändrad updated_at ger uppdatering
    currency: Optional[str] = None
    customs_invoice_nr: str = ""
    customs_shipment_type: Optional[str] = None
    order_status: Optional[dict[str, str]] = None
    payment_status: Optional[dict[str, str]] = None
    parcel_items: Optional[list[ParcelItem]] = None
    shipping_method: Optional[int] = None
    shipping_method_checkout_name: str = ""
    sender_address: Optional[int] = None
    weight: str = ""

    def to_dict(self) -> dict:
        data = {f.name: _plain(getattr(self, f.name)) for f in fields(self)}
        # sender_address är det enda fältet som får utelämnas helt
        if self.sender_address is None:
            del data["sender_address"]
        return data
