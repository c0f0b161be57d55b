# utils/helpers.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import logging
from typing import Union, Optional

from ..constants import MONEY_PLACES, PERCENT_PLACES, WEIGHT_PLACES

NumberLike = Union[Decimal, float, int, str]

_log = logging.getLogger(__name__)

ZERO = Decimal("0")


def to_decimal(v: Optional[NumberLike]) -> Decimal:
    """
    Convert a form/DB value to Decimal. None and '' become 0.

    Floats go through repr() so 0.1 stays 0.1 instead of its binary expansion.
    Raises ValueError on anything that does not parse, and on NaN or Infinity.
    """
    if v is None or v == "":
        return ZERO
    if isinstance(v, Decimal):
        d = v
    else:
        if isinstance(v, float):
            v = repr(v)
        try:
            d = Decimal(str(v).strip())
        except InvalidOperation as e:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
    if not d.is_finite():
        raise ValueError(f"{v!r} is not a finite number.")
    return d


def quantize(v: NumberLike, places: int) -> Decimal:
    """Round half-up to a fixed number of decimal places."""
    return to_decimal(v).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def money(v: Optional[NumberLike]) -> Decimal:
    return quantize(v, MONEY_PLACES)


def weight(v: Optional[NumberLike]) -> Decimal:
    return quantize(v, WEIGHT_PLACES)


def to_minor(v: Optional[NumberLike], places: int) -> int:
    """
    Decimal -> integer minor units for storage.
    to_minor(Decimal('12.345'), 3) == 12345
    """
    return int(quantize(v, places).scaleb(places))


def from_minor(n: Optional[int], places: int) -> Decimal:
    """Integer minor units from storage -> Decimal with `places` decimals."""
    if n is None:
        return quantize(ZERO, places)
    return Decimal(int(n)).scaleb(-places).quantize(Decimal(1).scaleb(-places))


def fmt_money(
    v: NumberLike,
    places: int = MONEY_PLACES,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.
    """
    try:
        x = quantize(v, places)
    except (ValueError, TypeError) as e:
        _log.debug("fmt_money: failed to parse %r: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"


def fmt_weight(v: NumberLike) -> str:
    """Weight with three decimals (kg), e.g. '1,250.500'."""
    return fmt_money(v, WEIGHT_PLACES, sentinel="0.000")


# ---- storage conversions (see database/schema.py for the precision table) ----

def money_to_db(v: Optional[NumberLike]) -> int:
    return to_minor(v, MONEY_PLACES)


def money_from_db(n: Optional[int]) -> Decimal:
    return from_minor(n, MONEY_PLACES)


def weight_to_db(v: Optional[NumberLike]) -> int:
    return to_minor(v, WEIGHT_PLACES)


def weight_from_db(n: Optional[int]) -> Decimal:
    return from_minor(n, WEIGHT_PLACES)


def pct_to_db(v: Optional[NumberLike]) -> int:
    return to_minor(v, PERCENT_PLACES)


def pct_from_db(n: Optional[int]) -> Decimal:
    return from_minor(n, PERCENT_PLACES)
