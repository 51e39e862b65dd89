"""
fabric_engines.valuation -- Monetary value of stock on hand.

Responsibility:
    Price every roll in the warehouse and sum the result.  A roll with a
    manual price is valued at that price; any other roll is valued at the
    weighted average cost of its fabric.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Builds on
    fabric_engines.costing and fabric_engines.aggregation.

Strategies:
    FABRIC_AVERAGE   sum(roll.meters * (manual price or fabric average)).
                     The canonical warehouse figure.
    SUBCODE_AVERAGE  sum(sub-batch meters * sub-batch average).  Each dye
                     lot is priced from its own purchase evidence only.

    The two strategies disagree whenever lots were bought at different
    prices.  One call always applies one strategy to every fabric.

Invariants enforced:
    - total_warehouse_value == sum of per-fabric values; empty set -> 0.
    - Full precision.  Rounding is a display step
      (fabric_kernel.domain.money.display_amount).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal
from enum import Enum

from fabric_engines.aggregation import subcode_meters, unique_subcodes
from fabric_engines.costing import (
    roll_unit_price,
    subcode_average_cost,
    weighted_average_cost,
)
from fabric_kernel.domain.money import ZERO
from fabric_kernel.domain.records import Fabric, Purchase
from fabric_kernel.logging_config import get_logger

logger = get_logger("engines.valuation")


class ValuationMethod(str, Enum):
    """Which average prices rolls without a manual price."""

    FABRIC_AVERAGE = "fabric_average"
    SUBCODE_AVERAGE = "subcode_average"


def fabric_value(
    fabric: Fabric,
    purchases: Iterable[Purchase],
    fabrics: Iterable[Fabric],
) -> Decimal:
    """Value of one fabric's rolls at manual price or fabric-wide average."""
    if not fabric.rolls:
        return ZERO
    average = weighted_average_cost(fabric.main_code, purchases, fabrics)
    total = ZERO
    for roll in fabric.rolls:
        total += roll.meters * roll_unit_price(roll, average)
    return total


def fabric_subcode_value(
    fabric: Fabric,
    purchases: Iterable[Purchase],
    fabrics: Iterable[Fabric],
) -> Decimal:
    """Value of one fabric with each sub-batch priced at its own average."""
    total = ZERO
    for sub_code in unique_subcodes(fabric.rolls):
        meters = subcode_meters(fabric.rolls, sub_code)
        total += meters * subcode_average_cost(
            fabric.main_code, sub_code, purchases, fabrics
        )
    return total


def subcode_value(
    fabric: Fabric,
    sub_code: str,
    purchases: Iterable[Purchase],
    fabrics: Iterable[Fabric],
    method: ValuationMethod = ValuationMethod.FABRIC_AVERAGE,
) -> Decimal:
    """
    Value of the rolls in one sub-batch under ``method``.

    Summed over ``unique_subcodes(fabric.rolls)`` this equals the fabric's
    value under the same method.
    """
    rolls = [roll for roll in fabric.rolls if roll.sub_code == sub_code]
    if not rolls:
        return ZERO
    if ValuationMethod(method) is ValuationMethod.SUBCODE_AVERAGE:
        return subcode_meters(rolls, sub_code) * subcode_average_cost(
            fabric.main_code, sub_code, purchases, fabrics
        )
    average = weighted_average_cost(fabric.main_code, purchases, fabrics)
    total = ZERO
    for roll in rolls:
        total += roll.meters * roll_unit_price(roll, average)
    return total


def total_warehouse_value(
    fabrics: Sequence[Fabric],
    purchases: Sequence[Purchase],
    method: ValuationMethod = ValuationMethod.FABRIC_AVERAGE,
) -> Decimal:
    """
    Sum the value of every fabric using one strategy.

    Args:
        fabrics: All fabrics currently stocked.
        purchases: Full purchase history.
        method: Valuation strategy; fabric-level by default.

    Returns:
        Total stock value at full precision.
    """
    method = ValuationMethod(method)
    value_of = (
        fabric_subcode_value
        if method is ValuationMethod.SUBCODE_AVERAGE
        else fabric_value
    )

    total = ZERO
    for fabric in fabrics:
        total += value_of(fabric, purchases, fabrics)

    logger.debug(
        "warehouse_valued",
        extra={
            "method": method.value,
            "fabric_count": len(fabrics),
            "total_value": total,
        },
    )
    return total
