"""Typed read-only view over a decoded PayPal order response."""

from dataclasses import dataclass, field

from checkout.shared.money import Price

APPROVABLE_STATUSES = frozenset({"APPROVED", "COMPLETED"})
PAYABLE_STATUSES = frozenset({"APPROVED", "SAVED"})


@dataclass(frozen=True)
class RemoteOrder:
    id: str
    status: str
    intent: str | None = None
    purchase_units: list = field(default_factory=list)
    payer: dict = field(default_factory=dict)

    @classmethod
    def from_response(cls, response: dict) -> "RemoteOrder":
        return cls(
            id=response.get("id", ""),
            status=(response.get("status") or "").upper(),
            intent=(response.get("intent") or "").upper() or None,
            purchase_units=list(response.get("purchase_units") or []),
            payer=dict(response.get("payer") or {}),
        )

    @property
    def default_purchase_unit(self) -> dict:
        return self.purchase_units[0] if self.purchase_units else {}

    @property
    def amount(self) -> Price | None:
        amount = self.default_purchase_unit.get("amount")
        if not amount or "value" not in amount or "currency_code" not in amount:
            return None
        return Price.from_remote(amount)

    @property
    def shipping(self) -> dict:
        return self.default_purchase_unit.get("shipping") or {}

    @property
    def payer_email(self) -> str | None:
        return self.payer.get("email_address")

    def _payments(self, kind: str) -> list:
        return (self.default_purchase_unit.get("payments") or {}).get(kind) or []

    def first_capture(self) -> dict | None:
        captures = self._payments("captures")
        return captures[0] if captures else None

    def first_authorization(self) -> dict | None:
        authorizations = self._payments("authorizations")
        return authorizations[0] if authorizations else None
