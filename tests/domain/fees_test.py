from decimal import Decimal

import pytest

from domain.errors import InternalInvariantViolation
from domain.fees import FeeBreakdown


def test_from_components_sums_total() -> None:
    breakdown = FeeBreakdown.from_components(
        diboas=Decimal("0.9"),
        network=Decimal("10.001"),
        provider=Decimal("0"),
        dex=Decimal("8"),
        routing=Decimal("41.5"),
    )

    assert breakdown.total == Decimal("60.401")
    assert abs(breakdown.total - breakdown.components_sum()) <= Decimal("1e-12")


def test_rounded_quantizes_to_cents() -> None:
    breakdown = FeeBreakdown.from_components(
        diboas=Decimal("0.0045"),
        network=Decimal("0.000005"),
        provider=Decimal("0.025"),
        dex=Decimal("0"),
        routing=Decimal("0"),
    )

    rounded = breakdown.rounded()

    assert rounded["diboas"] == Decimal("0.00")
    assert rounded["provider"] == Decimal("0.02")
    # Full precision is kept on the model itself.
    assert breakdown.diboas == Decimal("0.0045")


def test_rounded_keeps_very_large_fees() -> None:
    breakdown = FeeBreakdown.from_components(
        diboas=Decimal("9E+26"),
        network=Decimal("0.001"),
        provider=Decimal("5E+27"),
        dex=Decimal("0"),
        routing=Decimal("0"),
    )

    rounded = breakdown.rounded()

    assert rounded["provider"] == Decimal("5000000000000000000000000000.00")
    assert rounded["total"] == Decimal("5900000000000000000000000000.00")
    assert rounded["network"] == Decimal("0.00")


def test_negative_component_is_an_invariant_violation() -> None:
    with pytest.raises(InternalInvariantViolation) as exc_info:
        FeeBreakdown.from_components(
            diboas=Decimal("1"),
            network=Decimal("-0.5"),
            provider=Decimal("0"),
            dex=Decimal("0"),
            routing=Decimal("0"),
        )

    assert "network" in exc_info.value.detail
    assert "network" not in str(exc_info.value)


def test_nan_component_is_an_invariant_violation() -> None:
    with pytest.raises(InternalInvariantViolation):
        FeeBreakdown.from_components(
            diboas=Decimal("NaN"),
            network=Decimal("0"),
            provider=Decimal("0"),
            dex=Decimal("0"),
            routing=Decimal("0"),
        )


def test_mismatched_total_is_an_invariant_violation() -> None:
    with pytest.raises(InternalInvariantViolation):
        FeeBreakdown(diboas=Decimal("1"), total=Decimal("2"))
