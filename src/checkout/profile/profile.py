"""CustomerProfile aggregate: a billing or shipping address owned by a customer.

Billing profiles are referenced by orders and payment methods, shipping
profiles by an order's shipments. Profiles approved through PayPal are
filled from the payer / shipping payload of the PayPal order.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String, ValueObject

from checkout.domain import checkout
from checkout.profile.events import ProfileAddressUpdated
from checkout.shared.address import Address, address_from_remote, split_full_name

CUSTOMER_PROFILE_TYPE = "customer"


@checkout.aggregate
class CustomerProfile:
    customer_id = Identifier()
    profile_type = String(max_length=50, default=CUSTOMER_PROFILE_TYPE)
    address = ValueObject(Address)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def build(cls, customer_id: str | None = None, address: Address | None = None):
        """An empty customer profile owned by the order's customer."""
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            profile_type=CUSTOMER_PROFILE_TYPE,
            address=address,
            created_at=now,
            updated_at=now,
        )

    def update_address(self, address: Address) -> None:
        now = datetime.now(UTC)
        self.address = address
        self.updated_at = now
        self.raise_(
            ProfileAddressUpdated(
                profile_id=str(self.id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                country_code=address.country_code,
                updated_at=now,
            )
        )

    def populate_from_payer(self, payer: dict) -> None:
        """Billing: payer name plus, when PayPal shared it, the payer address."""
        name = payer.get("name") or {}
        self.update_address(
            address_from_remote(
                payer.get("address"),
                given_name=name.get("given_name", ""),
                family_name=name.get("surname", ""),
                base=self.address,
            )
        )

    def populate_from_shipping(self, shipping: dict) -> None:
        """Shipping: PayPal only returns a full name, split on the first space."""
        given_name, family_name = split_full_name((shipping.get("name") or {}).get("full_name"))
        self.update_address(
            address_from_remote(
                shipping.get("address"),
                given_name=given_name,
                family_name=family_name,
                base=self.address,
            )
        )
