"""Price value object and currency-aware decimal helpers.

Amounts are stored as decimal strings so arithmetic never passes through
floating point. PayPal expects values quantized to the currency's minor
units: "19.99" for USD, "1000" for JPY.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from checkout.domain import checkout

# Currencies PayPal accepts without decimal places.
ZERO_DECIMAL_CURRENCIES = frozenset({"HUF", "JPY", "TWD"})


def minor_units(currency_code: str) -> int:
    return 0 if currency_code.upper() in ZERO_DECIMAL_CURRENCIES else 2


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError({"number": [f"Invalid amount: {value!r}"]}) from None


def round_amount(value, currency_code: str) -> Decimal:
    """Round to the currency's minor units (half up)."""
    exponent = Decimal(1).scaleb(-minor_units(currency_code))
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def format_amount(value, currency_code: str) -> str:
    return str(round_amount(value, currency_code))


@checkout.value_object
class Price:
    """A decimal amount in a given ISO 4217 currency."""

    number = String(required=True, max_length=32)
    currency_code = String(required=True, max_length=3, min_length=3)

    @invariant.post
    def number_must_be_a_decimal(self):
        try:
            value = Decimal(self.number)
        except InvalidOperation:
            raise ValidationError({"number": [f"Invalid amount: {self.number!r}"]}) from None
        if not value.is_finite():
            raise ValidationError({"number": [f"Invalid amount: {self.number!r}"]})

    @classmethod
    def of(cls, value, currency_code: str) -> "Price":
        return cls(number=str(to_decimal(value)), currency_code=currency_code.upper())

    @classmethod
    def zero(cls, currency_code: str) -> "Price":
        return cls.of(0, currency_code)

    @classmethod
    def from_remote(cls, amount: dict) -> "Price":
        """Build a Price from a PayPal ``{"value", "currency_code"}`` amount."""
        return cls.of(amount["value"], amount["currency_code"])

    def to_decimal(self) -> Decimal:
        return Decimal(self.number)

    def to_remote(self) -> dict:
        return {
            "currency_code": self.currency_code,
            "value": format_amount(self.number, self.currency_code),
        }

    def _assert_same_currency(self, other: "Price") -> None:
        if self.currency_code != other.currency_code:
            raise ValidationError(
                {"currency_code": [f"Currency mismatch: {self.currency_code} vs {other.currency_code}"]}
            )

    def add(self, other: "Price") -> "Price":
        self._assert_same_currency(other)
        return Price.of(self.to_decimal() + other.to_decimal(), self.currency_code)

    def subtract(self, other: "Price") -> "Price":
        self._assert_same_currency(other)
        return Price.of(self.to_decimal() - other.to_decimal(), self.currency_code)

    def multiply(self, factor) -> "Price":
        return Price.of(self.to_decimal() * to_decimal(factor), self.currency_code)

    def round(self) -> "Price":
        return Price.of(round_amount(self.number, self.currency_code), self.currency_code)

    def equals(self, other: "Price | None") -> bool:
        if other is None:
            return False
        return self.currency_code == other.currency_code and self.to_decimal() == other.to_decimal()

    def less_than(self, other: "Price") -> bool:
        self._assert_same_currency(other)
        return self.to_decimal() < other.to_decimal()

    def greater_than(self, other: "Price") -> bool:
        self._assert_same_currency(other)
        return self.to_decimal() > other.to_decimal()

    def is_positive(self) -> bool:
        return self.to_decimal() > 0

    def fits_minor_units(self) -> bool:
        """True when the amount needs no rounding to be sent to PayPal."""
        return self.to_decimal() == round_amount(self.number, self.currency_code)


def sum_prices(prices, currency_code: str) -> Price:
    total = Price.zero(currency_code)
    for price in prices:
        total = total.add(price)
    return total
