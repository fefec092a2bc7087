def _receive(client, **overrides):
    payload = {
        "collectionName": "Sajna Lawn",
        "designName": "Gulnar",
        "color": "Red",
        "size": "M",
        "locationCode": "001",
        "inHouseStock": 25,
        "outSourceStock": 5,
        "vendorName": "Al-Karam Mills",
        "costPrice": 2400,
        "sellingPrice": 3990,
        "receivedBy": "Ayesha",
    }
    payload.update(overrides)
    res = client.post("/inventory", json=payload)
    assert res.status_code == 201, res.text
    return res.json()


def test_root_health_and_ready(test_context):
    client, _ = test_context

    assert client.get("/").json()["health"] == "/health"
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/ready").status_code == 200


def test_receive_and_read_inventory_item(test_context):
    client, _ = test_context

    item = _receive(client)
    assert item["item_code"] == "ITM-0001"
    assert item["quantity"] == 30
    assert item["location_name"] == "Main Warehouse"
    assert item["selling_price"] == 3990.0

    fetched = client.get("/inventory/itm-0001")
    assert fetched.status_code == 200, fetched.text
    assert fetched.json()["design_name"] == "Gulnar"

    duplicate = client.post(
        "/inventory",
        json={
            "collection_name": "Sajna Lawn",
            "design_name": "Gulnar",
            "color": "Red",
            "size": "M",
            "vendor_name": "Al-Karam Mills",
            "received_by": "Ayesha",
        },
    )
    assert duplicate.status_code == 409, duplicate.text
    assert duplicate.json()["error"]["code"] == "conflict"


def test_receive_rejects_malformed_payload(test_context):
    client, _ = test_context

    res = client.post("/inventory", json={"collection_name": "Unknown", "size": "XS"})
    assert res.status_code == 400
    body = res.json()["error"]
    assert body["code"] == "validation_error"
    fields = {detail["field"] for detail in body["details"]}
    assert "collection_name" in fields
    assert "size" in fields


def test_transfer_endpoint_creates_destination(test_context):
    client, _ = test_context
    source = _receive(client)

    res = client.post(
        "/inventory/transfer",
        json={
            "itemCode": source["item_code"],
            "fromLocationCode": "001",
            "toLocationCode": "002",
            "quantity": 10,
            "transferredBy": "Bilal",
        },
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["destination_created"] is True
    assert body["source_item"]["in_house_stock"] == 15
    assert body["destination_item"]["location_code"] == "002"
    assert body["destination_item"]["in_house_stock"] == 10
    assert body["destination_item"]["out_source_stock"] == 0
    assert body["movement"]["movement_type"] == "transferred"
    assert body["movement"]["quantity"] == 10
    assert body["movement"]["reference_number"].startswith("TRF-")

    again = client.post(
        "/inventory/transfer",
        json={
            "item_code": source["item_code"],
            "from_location_code": "001",
            "to_location_code": "002",
            "quantity": 5,
            "transferred_by": "Bilal",
        },
    )
    assert again.status_code == 200, again.text
    assert again.json()["destination_created"] is False
    assert again.json()["destination_item"]["in_house_stock"] == 15

    shop = client.get("/locations/002/inventory")
    assert shop.status_code == 200, shop.text
    assert [row["in_house_stock"] for row in shop.json()["items"]] == [15]


def test_transfer_error_mapping(test_context):
    client, _ = test_context
    source = _receive(client, inHouseStock=3, outSourceStock=0)

    def _transfer(**overrides):
        payload = {
            "item_code": source["item_code"],
            "from_location_code": "001",
            "to_location_code": "002",
            "quantity": 1,
            "transferred_by": "Bilal",
        }
        payload.update(overrides)
        return client.post("/inventory/transfer", json=payload)

    insufficient = _transfer(quantity=5)
    assert insufficient.status_code == 400, insufficient.text
    error = insufficient.json()["error"]
    assert error["code"] == "insufficient_stock"
    assert error["message"] == "Insufficient stock. Available: 3, Requested: 5"
    assert error["details"] == {"available": 3, "requested": 5}
    assert error["path"] == "/inventory/transfer"
    assert error["request_id"] == insufficient.headers["X-Request-ID"]

    same_location = _transfer(to_location_code="001")
    assert same_location.status_code == 400
    assert same_location.json()["error"]["code"] == "invalid_argument"

    zero = _transfer(quantity=0)
    assert zero.status_code == 400
    assert zero.json()["error"]["code"] == "invalid_argument"

    missing = _transfer(from_location_code="003")
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Source inventory item not found"

    malformed = client.post("/inventory/transfer", json={"item_code": source["item_code"], "quantity": "lots"})
    assert malformed.status_code == 400

    stock = client.get(f"/inventory/{source['item_code']}").json()
    assert stock["in_house_stock"] == 3


def test_adjust_stock_endpoint_and_movement_history(test_context):
    client, _ = test_context
    item = _receive(client, inHouseStock=10, outSourceStock=0)
    code = item["item_code"]

    res = client.put(f"/inventory/{code}/stock", json={"inHouseChange": -100, "updatedBy": "Ayesha"})
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["item"]["in_house_stock"] == 0
    assert body["movement"]["quantity"] == 10
    assert body["movement"]["notes"] == "Stock decreased by 10"

    noop = client.put(f"/inventory/{code}/stock", json={"updated_by": "Zara"})
    assert noop.status_code == 200, noop.text
    assert noop.json()["movement"] is None
    assert noop.json()["item"]["updated_by"] == "Zara"

    history = client.get(f"/inventory/{code}/movements")
    assert history.status_code == 200, history.text
    assert [row["movement_type"] for row in history.json()["items"]] == ["adjusted", "received"]

    missing = client.put("/inventory/ITM-0404/stock", json={"inHouseChange": 1, "updatedBy": "Ayesha"})
    assert missing.status_code == 404
    assert client.get("/inventory/ITM-0404/movements").status_code == 404


def test_missing_fields_are_rejected_with_400(test_context):
    client, _ = test_context
    code = _receive(client, inHouseStock=4, outSourceStock=0)["item_code"]

    no_actor = client.post(
        "/inventory/transfer",
        json={"itemCode": code, "fromLocationCode": "001", "toLocationCode": "002", "quantity": 1},
    )
    assert no_actor.status_code == 400, no_actor.text
    error = no_actor.json()["error"]
    assert error["code"] == "validation_error"
    assert "transferred_by" in {detail["field"] for detail in error["details"]}

    no_quantity = client.post(
        "/inventory/transfer",
        json={"itemCode": code, "fromLocationCode": "001", "toLocationCode": "002", "transferredBy": "Bilal"},
    )
    assert no_quantity.status_code == 400, no_quantity.text
    assert "quantity" in {detail["field"] for detail in no_quantity.json()["error"]["details"]}

    bare = client.post("/inventory/transfer", json={"item_code": code, "quantity": 1})
    assert bare.status_code == 400
    assert bare.json()["error"]["code"] == "validation_error"

    no_updater = client.put(f"/inventory/{code}/stock", json={"inHouseChange": 1})
    assert no_updater.status_code == 400, no_updater.text
    error = no_updater.json()["error"]
    assert error["code"] == "validation_error"
    assert "updated_by" in {detail["field"] for detail in error["details"]}

    stock = client.get(f"/inventory/{code}").json()
    assert stock["in_house_stock"] == 4
    assert client.get("/inventory/ledger", params={"item_code": code}).json()["pagination"]["total"] == 1


def test_list_filters_low_stock_and_ledger(test_context):
    client, _ = test_context
    _receive(client)
    _receive(client, designName="Chandni", color="Green", size="L", inHouseStock=4, outSourceStock=0)
    _receive(client, designName="Chandni", color="Green", size="L", locationCode="003", inHouseStock=2, outSourceStock=0)

    listing = client.get("/inventory", params={"color": "Green"})
    assert listing.status_code == 200, listing.text
    assert listing.json()["pagination"]["total"] == 2

    search = client.get("/inventory", params={"q": "gul"})
    assert [row["design_name"] for row in search.json()["items"]] == ["Gulnar"]

    paged = client.get("/inventory", params={"limit": 1, "offset": 1})
    assert paged.json()["pagination"] == {"total": 3, "limit": 1, "offset": 1, "count": 1, "has_next": True}

    low = client.get("/inventory/low-stock")
    assert [row["quantity"] for row in low.json()["items"]] == [2, 4]
    low_at_shop = client.get("/inventory/low-stock", params={"threshold": 3, "location_code": "003"})
    assert low_at_shop.json()["pagination"]["total"] == 1

    ledger = client.get("/inventory/ledger", params={"movement_type": "received"})
    assert ledger.status_code == 200, ledger.text
    assert ledger.json()["pagination"]["total"] == 3
    assert client.get("/inventory/ledger", params={"movement_type": "stolen"}).status_code == 400


def test_update_and_deactivate_item(test_context):
    client, _ = test_context
    code = _receive(client)["item_code"]

    patched = client.patch(f"/inventory/{code}", json={"sellingPrice": 4250, "remarks": "Eid", "updatedBy": "Zara"})
    assert patched.status_code == 200, patched.text
    assert patched.json()["selling_price"] == 4250.0
    assert patched.json()["remarks"] == "Eid"

    empty_patch = client.patch(f"/inventory/{code}", json={"updated_by": "Zara"})
    assert empty_patch.status_code == 400

    deleted = client.delete(f"/inventory/{code}", params={"updated_by": "Zara"})
    assert deleted.status_code == 200, deleted.text
    assert deleted.json()["is_active"] is False

    assert client.get(f"/inventory/{code}").status_code == 404
    assert client.get("/inventory").json()["pagination"]["total"] == 0
    # History of a deactivated item stays readable.
    assert client.get(f"/inventory/{code}/movements").status_code == 200


def test_collections_endpoint(test_context):
    client, _ = test_context

    res = client.get("/inventory/collections")
    assert res.status_code == 200, res.text
    items = res.json()["items"]
    assert [row["name"] for row in items] == ["Sajna Lawn", "Parwaz", "Noor Jehan", "Raabta", "Custom"]
    assert items[0]["description"] == "Sajna Lawn summer collection"


def test_locations_endpoints(test_context):
    client, _ = test_context

    res = client.get("/locations")
    assert res.status_code == 200
    items = res.json()["items"]
    assert [row["code"] for row in items] == ["001", "002", "003", "004", "005"]
    assert [row["code"] for row in items if row["is_warehouse"]] == ["001"]

    unknown = client.get("/locations/vendor/inventory")
    assert unknown.status_code == 404
    assert unknown.json()["error"]["code"] == "not_found"


def test_sales_endpoints(test_context):
    client, _ = test_context
    code = _receive(client, locationCode="002", inHouseStock=6, outSourceStock=0)["item_code"]

    sale = client.post(
        "/sales",
        json={
            "itemCode": code,
            "locationCode": "002",
            "quantitySold": 2,
            "discount": 200,
            "paymentMethod": "Card",
            "soldBy": "Bilal",
        },
    )
    assert sale.status_code == 201, sale.text
    body = sale.json()
    assert body["sale"]["sale_code"] == "SALE-0001"
    assert body["sale"]["final_amount"] == 7780.0
    assert body["item"]["in_house_stock"] == 4
    assert body["item"]["quantity_sold"] == 2
    assert body["movement"]["to_location_code"] == "customer"

    oversell = client.post(
        "/sales",
        json={"item_code": code, "location_code": "002", "quantity_sold": 10, "sold_by": "Bilal"},
    )
    assert oversell.status_code == 400
    assert oversell.json()["error"]["code"] == "insufficient_stock"

    bad_method = client.post(
        "/sales",
        json={"item_code": code, "location_code": "002", "quantity_sold": 1, "sold_by": "Bilal", "payment_method": "IOU"},
    )
    assert bad_method.status_code == 400

    listing = client.get("/sales", params={"location_code": "002"})
    assert listing.status_code == 200, listing.text
    assert listing.json()["pagination"]["total"] == 1
    assert client.get("/sales", params={"location_code": "003"}).json()["items"] == []

    bad_range = client.get("/sales", params={"start_date": "2026-10-18", "end_date": "2026-10-01"})
    assert bad_range.status_code == 400
    assert bad_range.json()["error"]["code"] == "bad_request"
