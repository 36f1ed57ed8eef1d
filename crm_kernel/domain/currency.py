"""Currency -- ISO 4217 registry for quoting and invoicing currencies."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    decimal_places: int
    name: str


class CurrencyRegistry:
    """
    Currencies the CRM quotes and bills in.

    Lookups are case-insensitive and ignore surrounding whitespace. Codes
    outside the registry are rejected by ``Currency``; the settings loader
    uses ``is_valid`` to reject them at load time.
    """

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        info.code: info
        for info in (
            # Americas
            CurrencyInfo("MXN", 2, "Mexican Peso"),
            CurrencyInfo("USD", 2, "US Dollar"),
            CurrencyInfo("CAD", 2, "Canadian Dollar"),
            CurrencyInfo("ARS", 2, "Argentine Peso"),
            CurrencyInfo("BRL", 2, "Brazilian Real"),
            CurrencyInfo("CLP", 0, "Chilean Peso"),
            CurrencyInfo("COP", 2, "Colombian Peso"),
            CurrencyInfo("CRC", 2, "Costa Rican Colon"),
            CurrencyInfo("DOP", 2, "Dominican Peso"),
            CurrencyInfo("GTQ", 2, "Guatemalan Quetzal"),
            CurrencyInfo("PEN", 2, "Peruvian Sol"),
            CurrencyInfo("PYG", 0, "Paraguayan Guarani"),
            CurrencyInfo("UYU", 2, "Uruguayan Peso"),
            # Europe and other majors
            CurrencyInfo("EUR", 2, "Euro"),
            CurrencyInfo("GBP", 2, "Pound Sterling"),
            CurrencyInfo("CHF", 2, "Swiss Franc"),
            CurrencyInfo("JPY", 0, "Japanese Yen"),
            CurrencyInfo("KWD", 3, "Kuwaiti Dinar"),
        )
    }

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return cls.get_info(code) is not None

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls.get_info(code)
        return info.decimal_places if info else cls.DEFAULT_DECIMAL_PLACES
