from protean.fields import DateTime, Identifier, String

from checkout.domain import checkout


@checkout.event(part_of="CustomerProfile")
class ProfileAddressUpdated:
    __version__ = 1

    profile_id = Identifier(required=True)
    customer_id = Identifier()
    country_code = String()
    updated_at = DateTime(required=True)
