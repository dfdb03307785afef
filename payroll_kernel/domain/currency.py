"""Currency -- ISO 4217 registry of the currencies payroll is paid in."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str


class CurrencyRegistry:
    """Registry of the ISO 4217 currencies payroll may be run in."""

    # Payroll is paid in the currency of the jurisdiction; the registry only
    # carries the currencies of the jurisdictions we configure.  Every one of
    # them is paid in cents.
    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "USD": CurrencyInfo("USD", 2, "US Dollar"),
        "CAD": CurrencyInfo("CAD", 2, "Canadian Dollar"),
        "MXN": CurrencyInfo("MXN", 2, "Mexican Peso"),
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return code in cls._CURRENCIES

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls._CURRENCIES.get(code)
        if info is None:
            raise ValueError(f"Unknown currency: {code}")
        return info.decimal_places
