"""Conversion between the base unit (ta) and named Dece units."""

from decimal import Decimal, localcontext

from .config import DeceConfig
from .constants import UNITS
from .exceptions import ValidationError


def unit_exponent(unit: str, config: DeceConfig | None = None) -> int:
    """Return the power of ten for ``unit``."""
    allowed = config.units if config is not None else tuple(UNITS)
    if unit not in allowed or unit not in UNITS:
        raise ValidationError(
            f"Unknown unit {unit!r}; expected one of {', '.join(allowed)}",
            field="unit",
            value=unit,
        )
    return UNITS[unit]


def to_ta(value: int | float | str | Decimal, unit: str = "dece", config: DeceConfig | None = None) -> int:
    """Convert ``value`` expressed in ``unit`` to an integer amount of ta."""
    config = config or DeceConfig()
    exponent = unit_exponent(unit, config)
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    if amount < 0:
        raise ValidationError("Value cannot be negative", field="value", value=value)

    with localcontext() as ctx:
        ctx.prec = max(28, len(amount.as_tuple().digits) + exponent + 2)
        ctx.rounding = config.rounding
        scaled = amount.scaleb(exponent)
        return int(scaled.to_integral_value(rounding=config.rounding))


def from_ta(value: int, unit: str = "dece", config: DeceConfig | None = None) -> Decimal:
    """Convert an integer amount of ta to ``unit``."""
    config = config or DeceConfig()
    exponent = unit_exponent(unit, config)
    with localcontext() as ctx:
        ctx.prec = max(28, len(str(abs(int(value)))) + exponent + 2)
        ctx.rounding = config.rounding
        return Decimal(int(value)).scaleb(-exponent)
