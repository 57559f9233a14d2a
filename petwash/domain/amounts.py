"""Monetary arithmetic shared by bills, work orders, ledgers and invoices.

All amounts are ``Decimal`` and rounded half-up to agorot (two places).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from petwash.domain.exceptions import BusinessRuleError

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce ``value`` to a two-place Decimal. ``None`` counts as zero."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def checked_total(label: str, components: dict[str, object], supplied=None) -> Decimal:
    """Sum ``components`` and reconcile against a caller-supplied total.

    Args:
        label: Field name of the total, used in the error message.
        components: Named addends, e.g. ``{"amount": ..., "vat": ...}``.
        supplied: Total sent by the client, if any.

    Raises:
        BusinessRuleError: When ``supplied`` disagrees with the computed sum.
    """
    total = sum((to_money(v) for v in components.values()), Decimal("0.00"))
    if supplied is not None and to_money(supplied) != total:
        raise BusinessRuleError(
            f"{label} does not equal the sum of {', '.join(components)}",
            details={
                "field": label,
                "supplied": format(to_money(supplied), "f"),
                "expected": format(total, "f"),
            },
        )
    return total


def parts_cost(parts_used: list[dict] | None) -> Decimal:
    """Total cost of ``[{partId, quantity, cost}]`` where ``cost`` is per unit."""
    return sum(
        (to_money(part.get("cost")) * int(part.get("quantity", 0)) for part in parts_used or []),
        Decimal("0.00"),
    )


@dataclass(frozen=True)
class VatBreakdown:
    """A VAT-inclusive total split into its net and tax parts."""

    total: Decimal
    amount_before_vat: Decimal
    vat_amount: Decimal
    vat_rate: Decimal


def split_vat(total, vat_rate) -> VatBreakdown:
    """Split a VAT-inclusive ``total`` at ``vat_rate`` (e.g. ``0.18``)."""
    total = to_money(total)
    vat_rate = Decimal(str(vat_rate))
    before = (total / (1 + vat_rate)).quantize(CENT, rounding=ROUND_HALF_UP)
    return VatBreakdown(
        total=total,
        amount_before_vat=before,
        vat_amount=(total - before).quantize(CENT, rounding=ROUND_HALF_UP),
        vat_rate=vat_rate,
    )
