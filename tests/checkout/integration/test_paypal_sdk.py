"""Tests for the httpx PayPal adapter against a mocked PayPal API."""

import base64
import json

import httpx
import pytest
from checkout.exceptions import RemoteCallError
from checkout.gateway.port import SANDBOX_BASE_URL
from checkout.gateway.sdk import ClientCredentialsAuth, PayPalCheckoutSdk


class FakePayPalApi:
    """Routes requests to canned responses and records them."""

    def __init__(self):
        self.requests = []
        self.tokens_issued = 0
        self.token_expires_in = 32400
        self.rejected_tokens = set()
        self.routes = {}

    def route(self, method, path, status_code=200, json_body=None):
        self.routes[(method, path)] = (status_code, json_body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/v1/oauth2/token":
            self.tokens_issued += 1
            return httpx.Response(
                200,
                json={"access_token": f"token-{self.tokens_issued}", "expires_in": self.token_expires_in},
            )
        if request.headers.get("Authorization", "").removeprefix("Bearer ") in self.rejected_tokens:
            return httpx.Response(401, json={"error": "invalid_token"})
        status_code, json_body = self.routes.get((request.method, request.url.path), (404, {"name": "NOT_FOUND"}))
        if json_body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=json_body)

    def api_requests(self):
        return [request for request in self.requests if request.url.path != "/v1/oauth2/token"]


@pytest.fixture()
def api():
    return FakePayPalApi()


@pytest.fixture()
def sdk(api):
    sdk = PayPalCheckoutSdk("client-abc", "secret-abc", transport=httpx.MockTransport(api))
    yield sdk
    sdk.close()


class TestAuthentication:
    def test_token_is_fetched_once_and_reused(self, api, sdk):
        api.route("GET", "/v2/checkout/orders/ORDER-1", json_body={"id": "ORDER-1", "status": "APPROVED"})

        sdk.get_order("ORDER-1")
        sdk.get_order("ORDER-1")

        assert api.tokens_issued == 1
        assert all(r.headers["Authorization"] == "Bearer token-1" for r in api.api_requests())

    def test_token_request_uses_client_credentials(self, api, sdk):
        api.route("GET", "/v2/checkout/orders/ORDER-1", json_body={"id": "ORDER-1"})
        sdk.get_order("ORDER-1")

        token_request = api.requests[0]
        expected = base64.b64encode(b"client-abc:secret-abc").decode()
        assert token_request.url.path == "/v1/oauth2/token"
        assert token_request.headers["Authorization"] == f"Basic {expected}"
        assert token_request.content == b"grant_type=client_credentials"

    def test_rejected_token_is_refreshed_once(self, api, sdk):
        api.route("GET", "/v2/checkout/orders/ORDER-1", json_body={"id": "ORDER-1"})
        sdk.get_order("ORDER-1")
        api.rejected_tokens.add("token-1")

        assert sdk.get_order("ORDER-1") == {"id": "ORDER-1"}
        assert api.tokens_issued == 2
        assert api.api_requests()[-1].headers["Authorization"] == "Bearer token-2"

    def test_expired_token_is_renewed(self, api):
        now = [1000.0]
        client = httpx.Client(
            base_url=SANDBOX_BASE_URL,
            auth=ClientCredentialsAuth("client-abc", "secret-abc", clock=lambda: now[0]),
            transport=httpx.MockTransport(api),
        )
        api.token_expires_in = 120
        api.route("GET", "/v2/checkout/orders/ORDER-1", json_body={"id": "ORDER-1"})

        client.get("/v2/checkout/orders/ORDER-1")
        now[0] += 59
        client.get("/v2/checkout/orders/ORDER-1")
        assert api.tokens_issued == 1

        now[0] += 2
        client.get("/v2/checkout/orders/ORDER-1")
        assert api.tokens_issued == 2
        client.close()

    def test_get_access_token(self, api, sdk):
        token = sdk.get_access_token()
        assert token["access_token"] == "token-1"
        assert api.requests[0].headers["Content-Type"] == "application/x-www-form-urlencoded"


class TestOrdersApi:
    def test_create_order(self, api, sdk):
        api.route("POST", "/v2/checkout/orders", status_code=201, json_body={"id": "ORDER-1", "status": "CREATED"})
        params = {"intent": "CAPTURE", "purchase_units": [{"reference_id": "default"}]}

        assert sdk.create_order(params)["id"] == "ORDER-1"
        assert json.loads(api.api_requests()[0].content) == params

    def test_update_order_replaces_the_default_purchase_unit(self, api, sdk):
        api.route("PATCH", "/v2/checkout/orders/ORDER-1", status_code=204)
        purchase_unit = {"reference_id": "default", "amount": {"currency_code": "USD", "value": "19.99"}}

        assert sdk.update_order("ORDER-1", {"intent": "CAPTURE", "purchase_units": [purchase_unit]}) == {}

        request = api.api_requests()[0]
        assert request.method == "PATCH"
        assert json.loads(request.content) == [
            {"op": "replace", "path": "/purchase_units/@reference_id=='default'", "value": purchase_unit}
        ]

    @pytest.mark.parametrize("method, path", [("authorize_order", "authorize"), ("capture_order", "capture")])
    def test_order_actions(self, api, sdk, method, path):
        api.route("POST", f"/v2/checkout/orders/ORDER-1/{path}", status_code=201, json_body={"id": "ORDER-1"})
        assert getattr(sdk, method)("ORDER-1") == {"id": "ORDER-1"}

    def test_client_token(self, api, sdk):
        api.route("POST", "/v1/identity/generate-token", json_body={"client_token": "ct-1"})
        assert sdk.get_client_token() == {"client_token": "ct-1"}


class TestPaymentsApi:
    def test_capture_authorization(self, api, sdk):
        api.route("POST", "/v2/payments/authorizations/AUTH-1/capture", status_code=201, json_body={"id": "CAP-1"})
        params = {"amount": {"currency_code": "USD", "value": "10.00"}, "final_capture": True}
        assert sdk.capture_payment("AUTH-1", params) == {"id": "CAP-1"}
        assert json.loads(api.api_requests()[0].content) == params

    def test_reauthorize(self, api, sdk):
        api.route("POST", "/v2/payments/authorizations/AUTH-1/reauthorize", status_code=201, json_body={"id": "AUTH-2"})
        assert sdk.reauthorize_payment("AUTH-1", {"amount": {"currency_code": "USD", "value": "10.00"}})["id"] == "AUTH-2"

    def test_refund(self, api, sdk):
        api.route("POST", "/v2/payments/captures/CAP-1/refund", status_code=201, json_body={"status": "COMPLETED"})
        assert sdk.refund_payment("CAP-1", {"amount": {"currency_code": "USD", "value": "1.00"}})["status"] == "COMPLETED"

    def test_void_returns_the_status_code(self, api, sdk):
        api.route("POST", "/v2/payments/authorizations/AUTH-1/void", status_code=204)
        assert sdk.void_payment("AUTH-1") == 204


class TestErrors:
    def test_non_2xx_raises_with_body(self, api, sdk):
        api.route(
            "POST",
            "/v2/checkout/orders/ORDER-1/capture",
            status_code=422,
            json_body={"name": "UNPROCESSABLE_ENTITY", "details": [{"issue": "INSTRUMENT_DECLINED"}]},
        )
        with pytest.raises(RemoteCallError) as exc:
            sdk.capture_order("ORDER-1")
        assert exc.value.status_code == 422
        assert exc.value.body["details"][0]["issue"] == "INSTRUMENT_DECLINED"

    def test_rejected_credentials(self, api):
        def reject(request):
            return httpx.Response(401, json={"error": "invalid_client"})

        sdk = PayPalCheckoutSdk("bad", "bad", transport=httpx.MockTransport(reject))
        with pytest.raises(RemoteCallError) as exc:
            sdk.get_access_token()
        assert exc.value.status_code == 401
        sdk.close()

    def test_rejected_credentials_during_a_call(self):
        def reject(request):
            return httpx.Response(401, json={"error": "invalid_client"})

        sdk = PayPalCheckoutSdk("bad", "bad", transport=httpx.MockTransport(reject))
        with pytest.raises(RemoteCallError):
            sdk.get_order("ORDER-1")
        sdk.close()
