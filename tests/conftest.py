"""
Pytest fixtures for the fabric ERP test suite.

Provides:
- Structured logging configured once per session, with per-test capture
- An in-memory SQLite record store, fresh for every test that asks for it
- A deterministic clock
- Small record builders shared by engine and service tests
"""

import json
import logging
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO

import pytest

from fabric_kernel.db.engine import create_tables, init_engine_from_url, reset_engine
from fabric_kernel.domain.clock import DeterministicClock
from fabric_kernel.domain.records import (
    Fabric,
    OrderItem,
    Purchase,
    PurchaseItem,
    Roll,
)
from fabric_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from fabric_services.store import SqlRecordStore

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, handler=logging.NullHandler())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture fabric_erp logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            deduct_stock(fabrics, items)
            logs = captured_logs()
            assert any(r["message"] == "deduction_line_skipped" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("fabric_erp")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Store fixtures
# =============================================================================


@pytest.fixture
def store():
    """A SqlRecordStore over a private in-memory SQLite database."""
    init_engine_from_url("sqlite://")
    create_tables()
    yield SqlRecordStore()
    reset_engine()


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2026, 1, 15, 9, 30, tzinfo=UTC))


# =============================================================================
# Record builders
# =============================================================================


def make_roll(roll_id, meters, sub_code="A-1", price="0", original_meters=None):
    return Roll(
        roll_id=roll_id,
        sub_code=sub_code,
        meters=Decimal(str(meters)),
        price=Decimal(str(price)),
        original_meters=None if original_meters is None else Decimal(str(original_meters)),
    )


def make_purchase(*lines, date="2026-01-01", vat_rate="24"):
    """``lines`` are (fabric_code, meters, price_per_meter[, sub_code]) tuples."""
    items = []
    for line in lines:
        fabric_code, meters, price = line[:3]
        sub_code = line[3] if len(line) > 3 else "A-1"
        meters, price = Decimal(str(meters)), Decimal(str(price))
        items.append(PurchaseItem(fabric_code, sub_code, meters, price, meters * price))
    return Purchase(supplier="Mill", date=date, items=tuple(items), vat_rate=Decimal(vat_rate))


def make_item(fabric_code, roll_id, meters, price="10", sub_code="A-1"):
    meters, price = Decimal(str(meters)), Decimal(str(price))
    return OrderItem(fabric_code, roll_id, sub_code, meters, price, meters * price)


@pytest.fixture
def roll():
    return make_roll


@pytest.fixture
def purchase():
    return make_purchase


@pytest.fixture
def item():
    return make_item


@pytest.fixture
def fabric_a():
    """Fabric A with one 20 m roll and no manual price."""
    return Fabric(main_code="A", name="Cotton", color="Navy", rolls=(make_roll(1, 20),))
