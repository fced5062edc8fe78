"""
Price range validation and canonical formatting.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

_NUMERIC = re.compile(r"^(?:\d+(?:\.\d*)?|\.\d+)$")
_TWO_PLACES = Decimal("0.01")


class PriceValidator:
    """
    Accepts plain decimal price strings inside an inclusive [min_price, max_price] band.

    Thousands separators (commas) are ignored. Formatting renders exactly two
    fraction digits with a `.` decimal point and no grouping, which is the
    representation written everywhere downstream.
    """

    def __init__(
        self,
        *,
        min_price: Decimal = Decimal("10"),
        max_price: Decimal = Decimal("1000000"),
    ) -> None:
        if max_price < min_price:
            raise ValueError(f"Invalid price range {min_price}..{max_price}.")
        self.min_price = Decimal(min_price)
        self.max_price = Decimal(max_price)

    def parse(self, raw: object) -> Decimal | None:
        """
        Return the numeric value of `raw`, or None if it is not a non-negative decimal.
        """

        if raw is None:
            return None
        cleaned = str(raw).replace(",", "").strip()
        if not _NUMERIC.match(cleaned):
            return None
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return None

    def is_valid(self, raw: object) -> bool:
        value = self.parse(raw)
        if value is None:
            return False
        return self.min_price <= value <= self.max_price

    def format(self, raw: object) -> str:
        value = self.parse(raw)
        if value is None:
            raise ValueError(f"Not a price: {raw!r}")
        # Room for every integer digit plus the two fraction digits.
        with localcontext() as context:
            context.prec = max(context.prec, value.adjusted() + 3)
            return str(value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))
