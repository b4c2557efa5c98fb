"""In-memory PayPal processor for development and testing.

Keeps remote orders in a dict and answers every SDK call the way the
sandbox would for a happy-path buyer. Outcomes are configurable at runtime
(capture/authorization/refund statuses, void status code, one-shot
failures) and every call is recorded in ``calls`` so tests can assert on
the exact sequence of remote interactions.
"""

import copy
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from checkout.exceptions import RemoteCallError
from checkout.gateway.port import DEFAULT_REFERENCE_ID, CheckoutSdk


def _fake_id(prefix: str) -> str:
    return f"{prefix}{uuid4().hex[:15].upper()}"


class FakeCheckoutSdk(CheckoutSdk):
    """Configurable fake PayPal Checkout API."""

    def __init__(self, client_id: str = "fake-client-id") -> None:
        self.client_id = client_id
        self.orders: dict[str, dict] = {}
        self.calls: list[dict] = []
        self.capture_status = "COMPLETED"
        self.authorization_status = "CREATED"
        self.refund_status = "COMPLETED"
        self.void_status_code = 204
        self.authorization_expires_in = timedelta(days=29)
        self._failures: dict[str, RemoteCallError] = {}

    def configure(
        self,
        capture_status: str | None = None,
        authorization_status: str | None = None,
        refund_status: str | None = None,
        void_status_code: int | None = None,
    ) -> None:
        """Configure remote outcomes at runtime."""
        if capture_status is not None:
            self.capture_status = capture_status
        if authorization_status is not None:
            self.authorization_status = authorization_status
        if refund_status is not None:
            self.refund_status = refund_status
        if void_status_code is not None:
            self.void_status_code = void_status_code

    def fail_next(self, method: str, status_code: int = 422, body=None) -> None:
        """Make the next call to ``method`` answer with a non-2xx status."""
        self._failures[method] = RemoteCallError(
            status_code,
            body=body or {"name": "UNPROCESSABLE_ENTITY", "details": [{"issue": "FAKE_FAILURE"}]},
        )

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def method_sequence(self) -> list[str]:
        return [call["method"] for call in self.calls]

    def _record(self, method: str, **arguments) -> None:
        self.calls.append({"method": method, **arguments})
        failure = self._failures.pop(method, None)
        if failure is not None:
            raise failure

    def _order(self, remote_id: str) -> dict:
        try:
            return self.orders[remote_id]
        except KeyError:
            raise RemoteCallError(404, body={"name": "RESOURCE_NOT_FOUND"}) from None

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------
    def approve(self, remote_id: str, payer: dict | None = None, shipping: dict | None = None) -> dict:
        """Simulate the buyer approving the order in the PayPal popup."""
        order = self._order(remote_id)
        order["status"] = "APPROVED"
        order["payer"] = payer or {
            "email_address": "buyer@example.com",
            "name": {"given_name": "Pat", "surname": "Buyer"},
            "address": {"country_code": "US"},
        }
        if shipping is not None:
            order["purchase_units"][0]["shipping"] = shipping
        return copy.deepcopy(order)

    # ------------------------------------------------------------------
    # CheckoutSdk
    # ------------------------------------------------------------------
    def get_access_token(self) -> dict:
        self._record("get_access_token")
        return {"access_token": f"A21{uuid4().hex}", "token_type": "Bearer", "expires_in": 32400}

    def get_client_token(self) -> dict:
        self._record("get_client_token")
        return {"client_token": f"client-token-{uuid4().hex[:12]}", "expires_in": 3600}

    def create_order(self, params: dict) -> dict:
        self._record("create_order", params=params)
        remote_id = _fake_id("")
        self.orders[remote_id] = {
            "id": remote_id,
            "status": "CREATED",
            "intent": params.get("intent", "CAPTURE"),
            "purchase_units": copy.deepcopy(params.get("purchase_units", [])),
        }
        if "payer" in params:
            self.orders[remote_id]["payer"] = copy.deepcopy(params["payer"])
        return copy.deepcopy(self.orders[remote_id])

    def get_order(self, remote_id: str) -> dict:
        self._record("get_order", remote_id=remote_id)
        return copy.deepcopy(self._order(remote_id))

    def update_order(self, remote_id: str, params: dict) -> dict:
        self._record("update_order", remote_id=remote_id, params=params)
        order = self._order(remote_id)
        purchase_unit = copy.deepcopy(params["purchase_units"][0])
        units = order["purchase_units"]
        for index, unit in enumerate(units):
            if unit.get("reference_id", DEFAULT_REFERENCE_ID) == DEFAULT_REFERENCE_ID:
                # Buyer-selected shipping survives a replace that carries none.
                if "shipping" in unit and "shipping" not in purchase_unit:
                    purchase_unit["shipping"] = unit["shipping"]
                units[index] = purchase_unit
                break
        else:
            units.append(purchase_unit)
        return {}

    def authorize_order(self, remote_id: str) -> dict:
        self._record("authorize_order", remote_id=remote_id)
        order = self._order(remote_id)
        expiration = datetime.now(UTC) + self.authorization_expires_in
        authorization = {
            "id": _fake_id("AUTH"),
            "status": self.authorization_status,
            "amount": {
                "currency_code": order["purchase_units"][0]["amount"]["currency_code"],
                "value": order["purchase_units"][0]["amount"]["value"],
            },
            "expiration_time": expiration.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }
        order["status"] = "COMPLETED"
        order["purchase_units"][0]["payments"] = {"authorizations": [authorization]}
        return copy.deepcopy(order)

    def capture_order(self, remote_id: str) -> dict:
        self._record("capture_order", remote_id=remote_id)
        order = self._order(remote_id)
        capture = {
            "id": _fake_id("CAP"),
            "status": self.capture_status,
            "amount": {
                "currency_code": order["purchase_units"][0]["amount"]["currency_code"],
                "value": order["purchase_units"][0]["amount"]["value"],
            },
            "final_capture": True,
        }
        order["status"] = "COMPLETED"
        order["purchase_units"][0]["payments"] = {"captures": [capture]}
        return copy.deepcopy(order)

    def capture_payment(self, authorization_id: str, params: dict) -> dict:
        self._record("capture_payment", authorization_id=authorization_id, params=params)
        return {
            "id": _fake_id("CAP"),
            "status": self.capture_status,
            "amount": copy.deepcopy(params.get("amount")),
            "final_capture": params.get("final_capture", False),
        }

    def reauthorize_payment(self, authorization_id: str, params: dict) -> dict:
        self._record("reauthorize_payment", authorization_id=authorization_id, params=params)
        expiration = datetime.now(UTC) + self.authorization_expires_in
        return {
            "id": authorization_id,
            "status": "CREATED",
            "expiration_time": expiration.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }

    def refund_payment(self, capture_id: str, params: dict) -> dict:
        self._record("refund_payment", capture_id=capture_id, params=params)
        return {
            "id": _fake_id("REF"),
            "status": self.refund_status,
            "amount": copy.deepcopy(params.get("amount")),
        }

    def void_payment(self, authorization_id: str) -> int:
        self._record("void_payment", authorization_id=authorization_id)
        return self.void_status_code


class FakeSdkFactory:
    """Factory handing out one shared ``FakeCheckoutSdk`` for every gateway."""

    def __init__(self, sdk: FakeCheckoutSdk | None = None) -> None:
        self.sdk = sdk or FakeCheckoutSdk()

    def get(self, gateway) -> FakeCheckoutSdk:
        return self.sdk

    def forget(self, client_id: str) -> None:
        return None
