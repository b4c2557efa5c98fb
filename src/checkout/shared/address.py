"""Postal address value object and its mapping to/from PayPal's address shape.

PayPal names the fields differently (``admin_area_2`` is the locality,
``admin_area_1`` the administrative area) and allows longer values than
the local model, which caps everything but the country code at 255.
"""

from protean.fields import String

from checkout.domain import checkout

LOCAL_FIELD_MAX_LENGTH = 255

REMOTE_TO_LOCAL_FIELDS = {
    "address_line_1": "address_line1",
    "address_line_2": "address_line2",
    "admin_area_1": "administrative_area",
    "admin_area_2": "locality",
    "postal_code": "postal_code",
    "country_code": "country_code",
}

ADDRESS_FIELDS = (
    "given_name",
    "family_name",
    "address_line1",
    "address_line2",
    "locality",
    "administrative_area",
    "postal_code",
    "country_code",
)


@checkout.value_object
class Address:
    """A customer's postal address as stored on billing and shipping profiles."""

    given_name = String(max_length=LOCAL_FIELD_MAX_LENGTH)
    family_name = String(max_length=LOCAL_FIELD_MAX_LENGTH)
    address_line1 = String(max_length=LOCAL_FIELD_MAX_LENGTH)
    address_line2 = String(max_length=LOCAL_FIELD_MAX_LENGTH)
    locality = String(max_length=LOCAL_FIELD_MAX_LENGTH)
    administrative_area = String(max_length=LOCAL_FIELD_MAX_LENGTH)
    postal_code = String(max_length=LOCAL_FIELD_MAX_LENGTH)
    country_code = String(max_length=2)

    def full_name(self) -> str:
        return " ".join(part for part in (self.given_name, self.family_name) if part)


def address_values(address: Address | None) -> dict:
    if address is None:
        return {}
    return {name: getattr(address, name) for name in ADDRESS_FIELDS if getattr(address, name)}


def format_remote_address(address: Address) -> dict:
    """Local address → PayPal ``address_portable`` (no name)."""
    remote = {
        "address_line_1": address.address_line1,
        "address_line_2": address.address_line2,
        "admin_area_2": address.locality,
        "admin_area_1": address.administrative_area,
        "postal_code": address.postal_code,
        "country_code": address.country_code,
    }
    return {key: value for key, value in remote.items() if value}


def format_remote_name(address: Address) -> dict:
    name = {"given_name": address.given_name, "surname": address.family_name}
    return {key: value for key, value in name.items() if value}


def split_full_name(full_name: str | None) -> tuple[str, str]:
    """PayPal only returns a full name for shipping; the first word is the given name."""
    names = (full_name or "").split(" ")
    given_name = names.pop(0)
    return given_name, " ".join(names)


def address_from_remote(
    remote_address: dict | None,
    given_name: str | None = None,
    family_name: str | None = None,
    base: Address | None = None,
) -> Address:
    """Overlay a PayPal address (and names) onto an existing local address."""
    values = address_values(base)
    if given_name is not None:
        values["given_name"] = given_name[:LOCAL_FIELD_MAX_LENGTH]
    if family_name is not None:
        values["family_name"] = family_name[:LOCAL_FIELD_MAX_LENGTH]

    for key, value in (remote_address or {}).items():
        local_key = REMOTE_TO_LOCAL_FIELDS.get(key)
        if local_key is None or value is None:
            continue
        values[local_key] = value if key == "country_code" else value[:LOCAL_FIELD_MAX_LENGTH]

    return Address(**values)
