"""
fabric_services.inventory_service -- Fabrics and rolls.

Responsibility:
    Create and delete fabrics, add and remove rolls, and report the value
    of stock on hand.  Roll ids are assigned here: one more than the
    highest id in the warehouse, so an id is never reused while the roll
    that had it still exists.

Architecture position:
    Services -- stateful orchestration over fabric_engines.valuation and
    the record store.  Time comes from an injected Clock.

Invariants enforced:
    - A fabric's rolls are always written as a whole array.
    - New rolls record ``date_added`` (ISO date) and ``original_meters``
      (their intake length).
"""

from __future__ import annotations

from decimal import Decimal

from fabric_engines.valuation import ValuationMethod, total_warehouse_value
from fabric_kernel.domain.clock import Clock, SystemClock
from fabric_kernel.domain.money import ZERO
from fabric_kernel.domain.normalize import (
    fabric_from_record,
    fabric_to_record,
    parse_decimal,
    rolls_to_records,
)
from fabric_kernel.domain.records import Fabric, Roll
from fabric_kernel.logging_config import get_logger
from fabric_services.snapshot import load_snapshot
from fabric_services.store import FABRICS, RecordStore

logger = get_logger("services.inventory")


class InventoryService:
    """
    Fabric catalog and roll stock.

    Usage:
        service = InventoryService(store, clock=DeterministicClock())
        fabric = service.add_fabric("100", name="Cotton", color="Navy")
        roll = service.add_roll(fabric.record_id, sub_code="100-1", meters="150")
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Clock | None = None,
        valuation_method: ValuationMethod = ValuationMethod.FABRIC_AVERAGE,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._valuation_method = ValuationMethod(valuation_method)

    def add_fabric(
        self,
        main_code: str,
        name: str = "",
        color: str = "",
        image: str = "",
    ) -> Fabric:
        fabric = Fabric(main_code=main_code, name=name, color=color, image=image)
        record_id = self._store.create(FABRICS, fabric_to_record(fabric))
        logger.info(
            "fabric_added",
            extra={"fabric_id": record_id, "main_code": main_code},
        )
        return fabric_from_record(self._store.get(FABRICS, record_id), record_id)

    def delete_fabric(self, fabric_id: str) -> None:
        self._store.delete(FABRICS, fabric_id)
        logger.info("fabric_deleted", extra={"fabric_id": fabric_id})

    def get_fabric(self, fabric_id: str) -> Fabric:
        return fabric_from_record(self._store.get(FABRICS, fabric_id), fabric_id)

    def next_roll_id(self) -> int:
        """One more than the highest roll id across all fabrics."""
        highest = 0
        for record in self._store.list(FABRICS):
            for roll in fabric_from_record(record).rolls:
                highest = max(highest, roll.roll_id)
        return highest + 1

    def add_roll(
        self,
        fabric_id: str,
        sub_code: str,
        meters,
        location: str = "",
        price=None,
    ) -> Roll:
        """
        Append a roll to a fabric.

        ``meters`` and ``price`` accept raw form input (``"87"``, ``"12,5"``).
        A missing or zero price leaves the roll valued at the average cost.

        Raises:
            RecordNotFoundError: if the fabric does not exist.
        """
        fabric = self.get_fabric(fabric_id)
        intake = parse_decimal(meters)
        roll = Roll(
            roll_id=self.next_roll_id(),
            sub_code=sub_code,
            meters=intake,
            price=parse_decimal(price),
            location=location,
            date_added=self._clock.today().isoformat(),
            original_meters=max(ZERO, intake),
        )
        self._store.update(
            FABRICS, fabric_id, {"rolls": rolls_to_records(fabric.rolls + (roll,))}
        )
        logger.info(
            "roll_added",
            extra={
                "fabric_id": fabric_id,
                "roll_id": roll.roll_id,
                "sub_code": sub_code,
                "meters": roll.meters,
            },
        )
        return roll

    def delete_roll(self, fabric_id: str, roll_id: int) -> None:
        fabric = self.get_fabric(fabric_id)
        remaining = tuple(r for r in fabric.rolls if r.roll_id != roll_id)
        self._store.update(FABRICS, fabric_id, {"rolls": rolls_to_records(remaining)})
        logger.info(
            "roll_deleted",
            extra={
                "fabric_id": fabric_id,
                "roll_id": roll_id,
                "found": len(remaining) != len(fabric.rolls),
            },
        )

    def stock_value(self, method: ValuationMethod | None = None) -> Decimal:
        """Warehouse value at full precision."""
        snapshot = load_snapshot(self._store)
        return total_warehouse_value(
            snapshot.fabrics,
            snapshot.purchases,
            method or self._valuation_method,
        )
