import json

import pytest
from fastapi.testclient import TestClient

import main
from conftest import FakeResponse, FakeSink
from controllers import SendcloudWebhookReconciler, get_webhook_reconciler
from utils.sendcloud import get_sendcloud_client


@pytest.fixture
def api(client, sink):
    main.app.dependency_overrides[get_webhook_reconciler] = lambda: SendcloudWebhookReconciler(sink)
    main.app.dependency_overrides[get_sendcloud_client] = lambda: client
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


def test_webhook_status_change(api, sink):
    res = api.post(
        "/webhooks/sendcloud",
        json={
            "action": "parcel_status_changed",
            "parcel": {"id": 42, "tracking_number": "TRK1", "status": {"id": 11, "message": "Delivered"}},
        },
    )

    assert res.status_code == 200
    assert res.json() == {
        "success": True,
        "message": "Successfully updated status for parcel 42 to Delivered",
    }
    assert sink.calls == [(42, "TRK1", "Delivered")]


def test_webhook_missing_action_still_200(api, sink):
    res = api.post("/webhooks/sendcloud", json={"parcel": {"id": 42}})

    assert res.status_code == 200
    assert res.json()["success"] is False
    assert sink.calls == []


def test_webhook_ignored_action(api, sink):
    res = api.post(
        "/webhooks/sendcloud",
        json={"action": "parcel_refund", "parcel": {"id": 42}},
    )

    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Action parcel_refund ignored"}
    assert sink.calls == []


def test_webhook_invalid_json_still_200(api):
    res = api.post(
        "/webhooks/sendcloud",
        content=b"{broken",
        headers={"Content-Type": "application/json"},
    )

    assert res.status_code == 200
    assert res.json()["success"] is False


def test_webhook_sink_failure_still_200(api):
    failing = FakeSink(error=RuntimeError("fulfillment service down"))
    main.app.dependency_overrides[get_webhook_reconciler] = lambda: SendcloudWebhookReconciler(failing)

    res = api.post(
        "/webhooks/sendcloud",
        json={
            "action": "parcel_status_changed",
            "parcel": {"id": 1, "status": {"id": 1, "message": "Announced"}},
        },
    )

    assert res.status_code == 200
    assert res.json() == {
        "success": False,
        "message": "Error processing webhook: fulfillment service down",
    }


def test_webhook_signature_header_is_checked(api, sink):
    main.app.dependency_overrides[get_webhook_reconciler] = lambda: SendcloudWebhookReconciler(
        sink, signing_secret="secret"
    )

    res = api.post(
        "/webhooks/sendcloud",
        json={"action": "parcel_refund", "parcel": {"id": 42}},
        headers={"Sendcloud-Signature": "forged"},
    )

    assert res.status_code == 200
    assert res.json()["message"] == "Error processing webhook: Invalid webhook signature"


def test_shipping_methods_route(api, sendcloud_api):
    sendcloud_api.responses.append(
        FakeResponse(json_data={"shipping_methods": [{"id": 8, "name": "PostNL"}]})
    )

    res = api.get("/sendcloud/shipping-methods", params={"to_country": "NL"})

    assert res.status_code == 200
    assert res.json()["shipping_methods"][0]["id"] == 8
    assert sendcloud_api.calls[0].url.endswith("/shipping_methods?to_country=NL")


def test_create_parcel_route_passes_extra_fields(api, sendcloud_api):
    sendcloud_api.responses.append(
        FakeResponse(json_data={"parcel": {"id": 9, "tracking_number": "TRK9"}})
    )

    res = api.post(
        "/sendcloud/parcels",
        json={
            "parcel": {
                "name": "Jane Doe",
                "address": "Stationsplein 1",
                "city": "Eindhoven",
                "postal_code": "5611AB",
                "country": "NL",
                "shipment": {"id": 8},
                "weight": "1.200",
                "order_number": "ORD-1",
                "to_service_point": 123,
            }
        },
    )

    assert res.status_code == 201
    assert res.json()["parcel"]["tracking_number"] == "TRK9"
    sent = sendcloud_api.calls[0].data
    assert '"to_service_point": 123' in sent
    assert "request_label" not in sent
    assert "company_name" not in sent


def test_get_parcel_route(api, sendcloud_api):
    sendcloud_api.responses.append(FakeResponse(json_data={"parcel": {"id": 3}}))

    res = api.get("/sendcloud/parcels/3")

    assert res.status_code == 200
    assert res.json() == {"parcel": {"id": 3}}


def test_cancel_route_maps_missing_parcel_to_404(api, sendcloud_api):
    sendcloud_api.responses.append(FakeResponse(status_code=404, json_data={}))

    res = api.post("/sendcloud/parcels/3/cancel")

    assert res.status_code == 404
    assert res.json() == {"message": "No Parcel matches the given query."}


def test_cancel_route_other_errors_are_400(api, sendcloud_api):
    sendcloud_api.responses.append(
        FakeResponse(status_code=400, json_data={"error": {"message": "Parcel already shipped"}})
    )

    res = api.post("/sendcloud/parcels/3/cancel")

    assert res.status_code == 400
    assert res.json() == {"message": "Parcel already shipped"}


def test_label_route(api, sendcloud_api):
    label = {"label": {"normal_printer": ["https://sendcloud.test/labels/3"]}}
    sendcloud_api.responses.append(FakeResponse(json_data=label))

    res = api.get("/sendcloud/labels/3")

    assert res.status_code == 200
    assert res.json() == label


def test_health_check_reports_sendcloud(api, client, sendcloud_api, monkeypatch):
    monkeypatch.setattr(main, "get_sendcloud_client", lambda: client)
    sendcloud_api.responses.append(FakeResponse(status_code=401, json_data={}))

    res = api.get("/")

    assert res.status_code == 200
    assert res.json()["sendcloud_health"] == "disconnected"


def test_missing_credentials_surface_as_configuration_error(api, monkeypatch):
    main.app.dependency_overrides.pop(get_sendcloud_client)
    monkeypatch.setattr("utils.sendcloud.SENDCLOUD_PUBLIC_KEY", None)
    get_sendcloud_client.cache_clear()

    res = api.get("/sendcloud/labels/3")

    assert res.status_code == 500
    assert res.json() == {"message": "Sendcloud public_key and secret_key are required"}


def test_cors_applies_to_shipping_routes(api, sendcloud_api):
    sendcloud_api.responses.append(FakeResponse(json_data={"shipping_methods": []}))

    res = api.get("/sendcloud/shipping-methods", headers={"Origin": "https://shop.test"})

    assert res.headers["access-control-allow-origin"] == "*"


def test_webhook_route_has_no_cors(api):
    res = api.post(
        "/webhooks/sendcloud",
        json={"action": "parcel_refund", "parcel": {"id": 42}},
        headers={"Origin": "https://shop.test"},
    )
    preflight = api.options(
        "/webhooks/sendcloud",
        headers={
            "Origin": "https://shop.test",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert res.status_code == 200
    assert "access-control-allow-origin" not in res.headers
    assert "access-control-allow-origin" not in preflight.headers


def test_create_parcel_route_forwards_partial_payload(api, sendcloud_api):
    sendcloud_api.responses.append(
        FakeResponse(status_code=400, json_data={"error": {"message": "name: This field is required."}})
    )

    res = api.post(
        "/sendcloud/parcels",
        json={"parcel": {"weight": 1.2, "request_label": True, "shipment": {"id": 8}}},
    )

    assert res.status_code == 400
    assert res.json() == {"message": "name: This field is required."}
    assert json.loads(sendcloud_api.calls[0].data) == {
        "parcel": {"weight": 1.2, "request_label": True, "shipment": {"id": 8}}
    }
