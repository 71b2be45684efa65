"""In-process stub implementing ``CarrierPort``.

Used when ``USE_HTTP_ADAPTERS`` is off (tests, local development). Every
call is deterministic and recorded on the instance so tests can assert on
the payload that would have been sent to Sendcloud.
"""

from .domain import CarrierError, CarrierPort, Shipment, format_delivery_status
from .http_adapters import is_label_url_allowed


class SendcloudStub(CarrierPort):
    """Fake carrier account with two carriers and one sender address."""

    def __init__(self, sender: dict | None = None):
        self.sender = sender if sender is not None else {
            "name": "Atelier",
            "address_line_1": "1 rue de la Paix",
            "postal_code": "75002",
            "city": "Paris",
            "country_code": "FR",
        }
        self.announced: list[dict] = []

    def quote(self, to_country, to_postal_code, carrier_code, weight_kg):
        return [{
            "code": f"{carrier_code}:standard",
            "name": f"{carrier_code.title()} Standard",
            "carrier_name": carrier_code.title(),
            "price": {"value": "4.90", "currency": "EUR"},
            "lead_time": 48,
            "last_mile": "home_delivery",
            "requires_service_point": False,
        }]

    def carriers(self):
        return ["colissimo", "mondial_relay", "Other"]

    def service_points(self, country, address, postal_code, city, carrier=""):
        return [
            {"id": 2, "name": "Tabac du Centre", "street": "rue Haute", "house_number": "3",
             "postal_code": postal_code, "city": city, "distance": 120.0, "formatted_opening_times": None},
            {"id": 1, "name": "Relais Gare", "street": "place de la Gare", "house_number": "1",
             "postal_code": postal_code, "city": city, "distance": 450.0, "formatted_opening_times": None},
        ]

    def sender_address(self):
        return self.sender or None

    def announce_shipment(self, payload):
        self.announced.append(payload)
        n = len(self.announced)
        return Shipment(
            shipment_id=f"shp_{n}",
            parcel_id=1000 + n,
            label_url=f"https://panel.sendcloud.sc/api/v3/parcels/{1000 + n}/documents/label",
            tracking_number=f"TRK{1000 + n}",
            tracking_url=f"https://tracking.example/TRK{1000 + n}",
            delivery_status=format_delivery_status("READY_TO_SEND"),
        )

    def download_label(self, url):
        if not is_label_url_allowed(url):
            raise CarrierError("Unsupported label URL.")
        return b"%PDF-1.4 stub label", "application/pdf"
