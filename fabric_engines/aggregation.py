"""
Stock Aggregator - group a fabric's rolls into sellable sub-batches.

Rolls cut from the same dye lot share a ``sub_code``.  The summary lists each
sub-batch once, in the order its first roll appears, with its total meters
and roll count.  Pure functions, no I/O.

The top-level summary does not price sub-batches independently: every group
carries the same fabric-wide weighted average.  The per-sub-batch average
lives in ``fabric_engines.costing.subcode_average_cost`` and is used by the
sub-batch valuation strategy.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from fabric_engines.costing import weighted_average_cost
from fabric_kernel.domain.money import ZERO, dsum
from fabric_kernel.domain.records import Fabric, Purchase, Roll


@dataclass(frozen=True)
class SubcodeSummary:
    """Totals for one sub-batch of a fabric."""

    sub_code: str
    meters: Decimal
    count: int
    avg_price: Decimal

    @property
    def value(self) -> Decimal:
        return self.meters * self.avg_price


def unique_subcodes(rolls: Iterable[Roll]) -> list[str]:
    """Distinct sub codes in first-occurrence order."""
    seen: dict[str, None] = {}
    for roll in rolls:
        seen.setdefault(roll.sub_code, None)
    return list(seen)


def total_meters(fabric: Fabric) -> Decimal:
    return dsum(roll.meters for roll in fabric.rolls)


def subcode_meters(rolls: Iterable[Roll], sub_code: str) -> Decimal:
    return dsum(roll.meters for roll in rolls if roll.sub_code == sub_code)


def subcode_summary(
    rolls: Sequence[Roll],
    fabric_code: str,
    purchases: Iterable[Purchase],
    fabrics: Iterable[Fabric],
) -> list[SubcodeSummary]:
    """
    Summarize rolls per sub code.

    Returns an empty list for an empty roll sequence.
    """
    if not rolls:
        return []

    avg_price = weighted_average_cost(fabric_code, purchases, fabrics)

    meters: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for roll in rolls:
        meters[roll.sub_code] = meters.get(roll.sub_code, ZERO) + roll.meters
        counts[roll.sub_code] = counts.get(roll.sub_code, 0) + 1

    return [
        SubcodeSummary(
            sub_code=sub_code,
            meters=meters[sub_code],
            count=counts[sub_code],
            avg_price=avg_price,
        )
        for sub_code in meters
    ]
