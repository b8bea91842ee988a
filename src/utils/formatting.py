from __future__ import annotations

from decimal import Decimal, localcontext


def format_decimal(value: Decimal) -> str:
    quantized = value.normalize()
    # Avoid scientific notation for integers.
    if quantized == quantized.to_integral():
        return f"{quantized:.0f}"
    return format(quantized, "f")


def format_currency(value: Decimal) -> str:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        cents = value.quantize(Decimal("0.01"))
    return f"{cents:.2f}"


def format_percent(rate: Decimal, places: int = 2) -> str:
    """Format a fraction (0.008) as a percentage string ("0.80%")."""
    exponent = Decimal(1).scaleb(-places)
    return f"{(rate * 100).quantize(exponent)}%"
