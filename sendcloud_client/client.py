"""Sendcloud API v2-klient.

Täcker:
- Parcels — skapa, uppdatera, avbryta, hämta paket och paketdokument
- Returns, Brands
- Shipping methods
- Labels — enskilda och bulk
- User — användare, fakturor, avsändaradresser
- Integrations — integrationer och upsert/radering av integrationssändningar

API-autentisering: Basic auth med api_key som användare och api_secret
som lösenord, på varje anrop.
Bas-URL: https://panel.sendcloud.sc/api/v2/

Varje metod gör exakt ett HTTP-anrop och returnerar svaret avkodat men
i övrigt orört. HTTP-fel (requests.HTTPError) och transportfel släpps
igenom oförändrade, ingen retry.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import requests

from .config import SendcloudConfig
from .models import DocumentType
from .options import build_query_string, normalize_document_options

logger = logging.getLogger(__name__)

# API-sökvägar (relativa till base_url)
API_PATHS = {
    "parcels": "/parcels",
    "parcel": "/parcels/{parcel_id}",
    "parcel_cancel": "/parcels/{parcel_id}/cancel",
    "parcel_return_portal_url": "/parcels/{parcel_id}/return_portal_url",
    "parcel_document": "/parcels/{parcel_id}/documents/{document_type}",
    "parcel_statuses": "/parcels/statuses",
    "returns": "/returns",
    "return": "/returns/{return_id}",
    "brands": "/brands",
    "brand": "/brands/{brand_id}",
    "shipping_methods": "/shipping_methods",
    "shipping_method": "/shipping_methods/{method_id}",
    "labels": "/labels",
    "label": "/labels/{parcel_id}",
    "user": "/user",
    "invoices": "/user/invoices",
    "invoice": "/user/invoices/{invoice_id}",
    "sender_addresses": "/user/addresses/sender",
    "sender_address": "/user/addresses/sender/{address_id}",
    "integrations": "/integrations",
    "integration": "/integrations/{integration_id}",
    "integration_shipments": "/integrations/{integration_id}/shipments",
    "integration_shipments_delete": "/integrations/{integration_id}/shipments/delete",
}

# Max antal ordrar per upsert-anrop enligt Sendcloud
INTEGRATION_SHIPMENT_BATCH_LIMIT = 100


def _as_body(data):
    """Dataklasser → dict, listor elementvis, allt annat oförändrat."""
    if isinstance(data, list):
        return [_as_body(item) for item in data]
    if hasattr(data, "to_dict"):
        return data.to_dict()
    return data


class SendcloudClient:
    """Klient för Sendcloud API v2.

    All konfiguration ägs av instansen (inget globalt tillstånd), så flera
    klienter med olika konton kan användas parallellt.

    Flöde (typiskt):
      1. create_parcel() → skapar paket, ev. med request_label
      2. get_parcel_document() → hämtar etikett som PDF/ZPL/PNG
      3. cancel_parcel() → avbryter om ordern ändras
    """

    def __init__(self, config: Union[SendcloudConfig, dict]):
        if not isinstance(config, SendcloudConfig):
            config = SendcloudConfig.from_dict(config)
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout_seconds
        self.sendcloud_plus = config.sendcloud_plus
        self.session = self._create_session(config)
        logger.debug(
            f"Sendcloud: Klient mot {self.base_url} "
            f"(Sendcloud Plus: {self.sendcloud_plus})"
        )

    def _create_session(self, config: SendcloudConfig) -> requests.Session:
        session = requests.Session()
        session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        session.auth = (config.api_key, config.api_secret)
        return session

    def _request(self, method: str, path: str, params=None, json=None):
        """Gör ett anrop och returnerar avkodat svar.

        JSON-svar returneras som dict/list, övriga (PDF, PNG, ZPL) som bytes.
        Tomt svar ger None.
        """
        url = f"{self.base_url}{path}{build_query_string(params)}"
        logger.debug(f"Sendcloud: {method} {url}")
        if json is not None:
            logger.debug(f"Sendcloud: Payload: {json}")

        response = self.session.request(
            method, url, json=json, timeout=self.timeout,
        )
        response.raise_for_status()
        return self._decode_response(response)

    def _decode_response(self, response: requests.Response):
        if not response.content:
            return None

        content_type = response.headers.get("Content-Type", "")
        if "json" in content_type:
            return response.json()

        logger.debug(
            f"Sendcloud: Binärt svar '{content_type}' "
            f"({len(response.content)} bytes)"
        )
        return response.content

    # ------------------------------------------------------------------
    # Parcels
    # ------------------------------------------------------------------

    def get_parcels(self, query=None):
        """Hämtar alla paket för kontot, ev. filtrerade.

        GET /parcels

        Args:
            query: ParcelQueryParameters eller dict med samma nycklar.
        """
        logger.info("Sendcloud: Hämtar paket")
        return self._request("GET", API_PATHS["parcels"], params=query)

    def get_parcel(self, parcel_id: Union[int, str]):
        logger.info(f"Sendcloud: Hämtar paket {parcel_id}")
        return self._request(
            "GET", API_PATHS["parcel"].format(parcel_id=parcel_id),
        )

    def create_parcel(self, data):
        """Skapar paket.

        POST /parcels

        Args:
            data: Request-body, t.ex. {"parcel": {...}} eller
                  {"parcels": [...]}. Skickas oförändrad.
        """
        logger.info("Sendcloud: Skapar paket")
        return self._request("POST", API_PATHS["parcels"], json=_as_body(data))

    def update_parcel(self, parcel_id: Union[int, str],
                      data: Optional[dict] = None):
        """Uppdaterar ett paket, ev. med etikettbeställning.

        PUT /parcels

        Fälten måste ligga under "parcel" tillsammans med paketets id.
        Alla fält från create_parcel går att ändra.
        """
        logger.info(f"Sendcloud: Uppdaterar paket {parcel_id}")
        parcel = {"id": parcel_id}
        parcel.update(_as_body(data) or {})
        return self._request("PUT", API_PATHS["parcels"], json={"parcel": parcel})

    def cancel_parcel(self, parcel_id: Union[int, str]):
        logger.info(f"Sendcloud: Avbryter paket {parcel_id}")
        return self._request(
            "POST", API_PATHS["parcel_cancel"].format(parcel_id=parcel_id),
            json={},
        )

    def get_return_portal_url(self, parcel_id: Union[int, str]):
        logger.info(f"Sendcloud: Hämtar returportal-URL för paket {parcel_id}")
        return self._request(
            "GET",
            API_PATHS["parcel_return_portal_url"].format(parcel_id=parcel_id),
        )

    def get_parcel_document(self, parcel_id: Union[int, str],
                            document_type: Union[DocumentType, str],
                            options: Optional[dict] = None):
        """Hämtar ett dokument för ett anmält paket.

        GET /parcels/{id}/documents/{type}?format=...&dpi=...

        Anmälda paket har alltid en etikett, och beroende på destination
        och transportör även t.ex. CN23 eller handelsfaktura.

        Args:
            parcel_id: Paketets ID.
            document_type: DocumentType eller dess strängvärde.
            options: {"format": FileFormat/str, "dpi": int}. Normaliseras
                     till en kombination som API:et godtar.

        Returns:
            Dokumentet som bytes (eller avkodad JSON vid JSON-svar).
        """
        if isinstance(document_type, DocumentType):
            document_type = document_type.value
        options = normalize_document_options(options)

        logger.info(
            f"Sendcloud: Hämtar {document_type} för paket {parcel_id} "
            f"({options['format']}, {options['dpi']} dpi)"
        )
        path = API_PATHS["parcel_document"].format(
            parcel_id=parcel_id, document_type=document_type,
        )
        return self._request("GET", path, params=options)

    def get_parcel_statuses(self):
        logger.info("Sendcloud: Hämtar paketstatusar")
        return self._request("GET", API_PATHS["parcel_statuses"])

    # ------------------------------------------------------------------
    # Returns
    # ------------------------------------------------------------------

    def get_returns(self):
        """Hämtar alla returer, från returportalen och från API:et.

        Om returen innehåller artiklar ligger refund/reason/message på
        artiklarna i stället för på returen.
        """
        logger.info("Sendcloud: Hämtar returer")
        return self._request("GET", API_PATHS["returns"])

    def get_return(self, return_id: Union[int, str]):
        logger.info(f"Sendcloud: Hämtar retur {return_id}")
        return self._request(
            "GET", API_PATHS["return"].format(return_id=return_id),
        )

    # ------------------------------------------------------------------
    # Brands
    # ------------------------------------------------------------------

    def get_brands(self):
        logger.info("Sendcloud: Hämtar brands")
        return self._request("GET", API_PATHS["brands"])

    def get_brand(self, brand_id: Union[int, str]):
        logger.info(f"Sendcloud: Hämtar brand {brand_id}")
        return self._request(
            "GET", API_PATHS["brand"].format(brand_id=brand_id),
        )

    # ------------------------------------------------------------------
    # Shipping methods
    # ------------------------------------------------------------------

    def get_shipping_methods(self, query=None):
        """Hämtar fraktmetoder för standardavsändaradressen.

        GET /shipping_methods

        Args:
            query: ShippingMethodsQueryParameters eller dict. Med
                   sender_address="all" returneras alla metoder.
        """
        logger.info("Sendcloud: Hämtar fraktmetoder")
        return self._request("GET", API_PATHS["shipping_methods"], params=query)

    def get_shipping_method(self, method_id: Union[int, str], query=None):
        logger.info(f"Sendcloud: Hämtar fraktmetod {method_id}")
        return self._request(
            "GET", API_PATHS["shipping_method"].format(method_id=method_id),
            params=query,
        )

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def get_label(self, parcel_id: Union[int, str]):
        """Hämtar etikettlänkar (PDF) för ett paket.

        GET /labels/{parcel_id}
        """
        logger.info(f"Sendcloud: Hämtar etikett för paket {parcel_id}")
        return self._request(
            "GET", API_PATHS["label"].format(parcel_id=parcel_id),
        )

    def create_labels_bulk(self, parcel_ids: list[Union[int, str]]):
        """Bulkutskrift av etiketter för flera paket.

        POST /labels med {"label": {"parcels": [id, ...]}}
        """
        logger.info(f"Sendcloud: Bulk-etiketter för {len(parcel_ids)} paket")
        return self._request(
            "POST", API_PATHS["labels"],
            json={"label": {"parcels": list(parcel_ids)}},
        )

    # ------------------------------------------------------------------
    # User
    # ------------------------------------------------------------------

    def get_user(self):
        logger.info("Sendcloud: Hämtar användare")
        return self._request("GET", API_PATHS["user"])

    def get_invoices(self):
        """Hämtar alla fakturor som utfärdats till kontot."""
        logger.info("Sendcloud: Hämtar fakturor")
        return self._request("GET", API_PATHS["invoices"])

    def get_invoice(self, invoice_id: Union[int, str]):
        logger.info(f"Sendcloud: Hämtar faktura {invoice_id}")
        return self._request(
            "GET", API_PATHS["invoice"].format(invoice_id=invoice_id),
        )

    def get_sender_addresses(self):
        logger.info("Sendcloud: Hämtar avsändaradresser")
        return self._request("GET", API_PATHS["sender_addresses"])

    def get_sender_address(self, address_id: Union[int, str]):
        logger.info(f"Sendcloud: Hämtar avsändaradress {address_id}")
        return self._request(
            "GET", API_PATHS["sender_address"].format(address_id=address_id),
        )

    # ------------------------------------------------------------------
    # Integrations
    # ------------------------------------------------------------------

    def get_integrations(self):
        logger.info("Sendcloud: Hämtar integrationer")
        return self._request("GET", API_PATHS["integrations"])

    def update_integration(self, integration_id: Union[int, str], data: dict):
        logger.info(f"Sendcloud: Uppdaterar integration {integration_id}")
        return self._request(
            "PUT",
            API_PATHS["integration"].format(integration_id=integration_id),
            json=data,
        )

    def get_integration_shipments(self, integration_id: Union[int, str],
                                  query=None):
        """Hämtar sändningar från en integration.

        GET /integrations/{id}/shipments

        Sändningarna påverkas INTE av Shipping Rules vid hämtning.

        Args:
            query: IntegrationShipmentQueryParameters eller dict.
        """
        logger.info(f"Sendcloud: Hämtar sändningar för integration {integration_id}")
        return self._request(
            "GET",
            API_PATHS["integration_shipments"].format(
                integration_id=integration_id,
            ),
            params=query,
        )

    def upsert_integration_shipments(self, integration_id: Union[int, str],
                                     shipments: list):
        """Lägger in eller uppdaterar sändningar i en API-integration.

        POST /integrations/{id}/shipments

        UPSERT: unikhet ges av (external_order_id, external_shipment_id).
        Befintliga poster uppdateras bara om updated_at har ändrats.
        external_shipment_id skickas som None om ordern inte delas upp
        i flera sändningar.

        Sendcloud tar max 100 ordrar per anrop. Större batcher skickas
        ändå oförändrade, API:et får avgöra.

        Args:
            shipments: Lista med IntegrationShipment eller dicts.
        """
        if len(shipments) > INTEGRATION_SHIPMENT_BATCH_LIMIT:
            logger.warning(
                f"Sendcloud: {len(shipments)} sändningar i en batch "
                f"(max {INTEGRATION_SHIPMENT_BATCH_LIMIT})"
            )
        logger.info(
            f"Sendcloud: Upsert av {len(shipments)} sändning(ar) "
            f"till integration {integration_id}"
        )
        return self._request(
            "POST",
            API_PATHS["integration_shipments"].format(
                integration_id=integration_id,
            ),
            json=_as_body(list(shipments)),
        )

    def delete_integration_shipment(self, integration_id: Union[int, str],
                                    data: dict):
        """Tar bort en sändning från en integration.

        POST /integrations/{id}/shipments/delete

        Används när ordern avbryts eller raderas i butiken. data måste
        innehålla antingen {"shipment_uuid": ...} eller både
        external_order_id och external_shipment_id.
        """
        logger.info(f"Sendcloud: Tar bort sändning från integration {integration_id}")
        return self._request(
            "POST",
            API_PATHS["integration_shipments_delete"].format(
                integration_id=integration_id,
            ),
            json=data,
        )
