"""Integration tests for the checkout API endpoints via TestClient."""

import pytest
from checkout.api.routes import GENERIC_GATEWAY_ERROR, HARD_DECLINE_ERROR
from checkout.payment_method.payment_method import PaymentMethod
from fastapi.testclient import TestClient
from protean import current_domain


@pytest.fixture()
def client(checkout_app):
    return TestClient(checkout_app)


def _configure_gateway(client, gateway_id="paypal", **settings):
    response = client.put(
        f"/payment-gateways/{gateway_id}",
        json={"client_id": "client-abc", "secret": "secret-abc", **settings},
    )
    assert response.status_code == 200
    return response.json()["payment_gateway_id"]


def _place_order(client, **overrides):
    body = {
        "customer_id": "cust-api-001",
        "currency_code": "USD",
        "items": [{"title": "T-shirt", "sku": "TS-001", "quantity": 1, "unit_price": "19.99"}],
        "store_name": "ShirtShop",
    }
    body.update(overrides)
    response = client.post("/orders", json=body)
    assert response.status_code == 201
    return response.json()["order_id"]


def _create_and_approve(client, fake_sdk, gateway_id="paypal", order_id=None):
    order_id = order_id or _place_order(client)
    response = client.post(f"/paypal/checkout/create/{gateway_id}/{order_id}")
    assert response.status_code == 200
    remote_order = fake_sdk.approve(response.json()["id"])
    response = client.post(f"/paypal/checkout/approve/{gateway_id}/{order_id}", json=remote_order)
    assert response.status_code == 200
    return order_id, remote_order


class TestGatewayAPI:
    def test_configure_and_read(self, client):
        _configure_gateway(client, intent="authorize", payment_solution="hosted_fields")
        response = client.get("/payment-gateways/paypal")
        assert response.status_code == 200
        body = response.json()
        assert body["intent"] == "authorize"
        assert body["payment_solution"] == "hosted_fields"
        assert "secret" not in body

    def test_invalid_credentials(self, client, fake_sdk):
        fake_sdk.fail_next("get_access_token", status_code=401)
        response = client.put("/payment-gateways/paypal", json={"client_id": "bad", "secret": "bad"})
        assert response.status_code == 400

    def test_unknown_intent_is_rejected(self, client):
        response = client.put(
            "/payment-gateways/paypal",
            json={"client_id": "client-abc", "secret": "secret-abc", "intent": "sale"},
        )
        assert response.status_code == 422


class TestOrderAPI:
    def test_place_and_read(self, client):
        order_id = _place_order(client, adjustments=[{"type": "shipping", "amount": "5.00"}])
        response = client.get(f"/orders/{order_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == "24.99"
        assert body["checkout_flow"] == "default"
        assert body["checkout_step"] == "login"

    def test_order_without_items(self, client):
        response = client.post("/orders", json={"customer_id": "c", "currency_code": "USD", "items": []})
        assert response.status_code == 422


class TestCreateRemoteOrder:
    def test_returns_the_paypal_order_id(self, client, fake_sdk):
        _configure_gateway(client)
        order_id = _place_order(client)
        response = client.post(f"/paypal/checkout/create/paypal/{order_id}")
        assert response.status_code == 200
        remote_id = response.json()["id"]
        assert fake_sdk.orders[remote_id]["purchase_units"][0]["custom_id"] == order_id

    def test_paypal_failure_is_an_empty_400(self, client, fake_sdk):
        _configure_gateway(client)
        order_id = _place_order(client)
        fake_sdk.fail_next("create_order", status_code=422)
        response = client.post(f"/paypal/checkout/create/paypal/{order_id}")
        assert response.status_code == 400
        assert response.content == b""

    def test_unknown_order(self, client):
        _configure_gateway(client)
        response = client.post("/paypal/checkout/create/paypal/does-not-exist")
        assert response.status_code == 404


class TestApproveRemoteOrder:
    def test_redirects_to_checkout(self, client, fake_sdk):
        _configure_gateway(client)
        order_id = _place_order(client)
        remote_id = client.post(f"/paypal/checkout/create/paypal/{order_id}").json()["id"]
        remote_order = fake_sdk.approve(remote_id)

        response = client.post(f"/paypal/checkout/approve/paypal/{order_id}", json=remote_order)

        assert response.status_code == 200
        assert response.json() == {"redirectUri": f"/checkout/{order_id}"}
        order = client.get(f"/orders/{order_id}").json()
        assert order["checkout_flow"] == "paypal_checkout"
        assert order["email"] == "buyer@example.com"

    def test_mismatch_is_an_empty_400(self, client, fake_sdk):
        _configure_gateway(client)
        order_id = _place_order(client)
        remote_id = client.post(f"/paypal/checkout/create/paypal/{order_id}").json()["id"]
        remote_order = fake_sdk.approve(remote_id)
        remote_order["purchase_units"][0]["amount"]["value"] = "19.98"

        response = client.post(f"/paypal/checkout/approve/paypal/{order_id}", json=remote_order)

        assert response.status_code == 400
        assert response.content == b""
        assert client.get(f"/orders/{order_id}").json()["payment_method_id"] is None


class TestWidgetSettings:
    def test_smart_payment_buttons(self, client):
        _configure_gateway(client)
        order_id = _place_order(client)
        response = client.get(f"/paypal/checkout/settings/paypal/{order_id}", params={"commit": "true"})
        assert response.status_code == 200
        body = response.json()
        assert body["solution"] == "smart_payment_buttons"
        assert "commit=true" in body["src"]
        assert body["onApproveUrl"] == f"/paypal/checkout/approve/paypal/{order_id}"

    def test_hosted_fields(self, client):
        _configure_gateway(client, payment_solution="hosted_fields")
        order_id = _place_order(client)
        body = client.get(f"/paypal/checkout/settings/paypal/{order_id}").json()
        assert body["clientToken"].startswith("client-token-")

    def test_redirect_has_no_widget(self, client):
        _configure_gateway(client, payment_solution="redirect")
        order_id = _place_order(client)
        response = client.get(f"/paypal/checkout/settings/paypal/{order_id}")
        assert response.status_code == 204


class TestOffsitePaymentAPI:
    def test_redirect_solution(self, client, fake_sdk):
        _configure_gateway(client, payment_solution="redirect")
        order_id, _ = _create_and_approve(client, fake_sdk)
        response = client.post(f"/paypal/checkout/offsite/paypal/{order_id}")
        assert response.status_code == 200
        assert response.json()["redirectUri"] == f"/checkout/{order_id}"

    def test_widget_solutions_are_refused(self, client, fake_sdk):
        _configure_gateway(client)
        order_id, _ = _create_and_approve(client, fake_sdk)
        response = client.post(f"/paypal/checkout/offsite/paypal/{order_id}")
        assert response.status_code == 400


class TestPaymentMethodAPI:
    def test_create(self, client):
        _configure_gateway(client)
        order_id = _place_order(client)
        response = client.post("/payment-methods", json={"order_id": order_id, "payment_gateway_id": "paypal"})
        assert response.status_code == 201
        method_id = response.json()["payment_method_id"]
        assert current_domain.repository_for(PaymentMethod).get(method_id).flow == "mark"


class TestPaymentAPI:
    def test_capture_intent_payment_and_refund(self, client, fake_sdk):
        _configure_gateway(client)
        order_id, _ = _create_and_approve(client, fake_sdk)

        response = client.post("/payments", json={"order_id": order_id})
        assert response.status_code == 201
        payment_id = response.json()["payment_id"]

        payment = client.get(f"/payments/{payment_id}").json()
        assert payment["state"] == "completed"
        assert payment["amount"] == "19.99"

        response = client.post(f"/payments/{payment_id}/refund", json={"amount": "4.99"})
        assert response.status_code == 200
        assert response.json()["state"] == "partially_refunded"
        assert response.json()["refunded_amount"] == "4.99"

        response = client.post(f"/payments/{payment_id}/refund")
        assert response.status_code == 200
        assert response.json()["state"] == "refunded"

    def test_authorize_and_capture(self, client, fake_sdk):
        _configure_gateway(client, intent="authorize")
        order_id, _ = _create_and_approve(client, fake_sdk)
        payment_id = client.post("/payments", json={"order_id": order_id}).json()["payment_id"]
        assert client.get(f"/payments/{payment_id}").json()["state"] == "authorization"

        response = client.post(f"/payments/{payment_id}/capture")
        assert response.status_code == 200
        assert response.json()["state"] == "completed"

    def test_authorize_and_void(self, client, fake_sdk):
        _configure_gateway(client, intent="authorize")
        order_id, _ = _create_and_approve(client, fake_sdk)
        payment_id = client.post("/payments", json={"order_id": order_id}).json()["payment_id"]

        response = client.post(f"/payments/{payment_id}/void")
        assert response.status_code == 200
        assert response.json()["state"] == "authorization_voided"

    def test_overdrawn_refund(self, client, fake_sdk):
        _configure_gateway(client)
        order_id, _ = _create_and_approve(client, fake_sdk)
        payment_id = client.post("/payments", json={"order_id": order_id}).json()["payment_id"]

        response = client.post(f"/payments/{payment_id}/refund", json={"amount": "20.00"})
        assert response.status_code == 400

    def test_gateway_error_is_generic(self, client, fake_sdk):
        _configure_gateway(client)
        order_id, _ = _create_and_approve(client, fake_sdk)
        fake_sdk.fail_next("capture_order", body={"name": "INSTRUMENT_DECLINED", "debug_id": "abc123"})

        response = client.post("/payments", json={"order_id": order_id})

        assert response.status_code == 402
        assert response.json() == {"error": GENERIC_GATEWAY_ERROR}

    def test_hard_decline(self, client, fake_sdk):
        _configure_gateway(client)
        order_id, _ = _create_and_approve(client, fake_sdk)
        fake_sdk.configure(capture_status="DECLINED")

        response = client.post("/payments", json={"order_id": order_id})

        assert response.status_code == 402
        assert response.json() == {"error": HARD_DECLINE_ERROR}

    def test_invalid_amount(self, client, fake_sdk):
        _configure_gateway(client)
        order_id, _ = _create_and_approve(client, fake_sdk)
        payment_id = client.post("/payments", json={"order_id": order_id}).json()["payment_id"]
        response = client.post(f"/payments/{payment_id}/refund", json={"amount": "-1"})
        assert response.status_code == 422
