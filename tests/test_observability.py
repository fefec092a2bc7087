import json
import logging

from app.core.observability import inventory_logger


class _Collector(logging.Handler):
    def __init__(self):
        super().__init__()
        self.events: list[dict] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.events.append(json.loads(record.getMessage()))


def test_domain_events_carry_request_id(test_context):
    client, _ = test_context
    collector = _Collector()
    inventory_logger.addHandler(collector)
    try:
        res = client.post(
            "/inventory",
            headers={"X-Request-ID": "req-123"},
            json={
                "collection_name": "Raabta",
                "design_name": "Saba",
                "color": "Teal",
                "size": "XL",
                "in_house_stock": 4,
                "vendor_name": "Khaadi Mills",
                "received_by": "Ayesha",
            },
        )
    finally:
        inventory_logger.removeHandler(collector)

    assert res.status_code == 201, res.text
    assert res.headers["X-Request-ID"] == "req-123"
    received = [event for event in collector.events if event["event"] == "stock.received"]
    assert len(received) == 1
    assert received[0]["request_id"] == "req-123"
    assert received[0]["item_code"] == "ITM-0001"
    assert received[0]["location_code"] == "001"
