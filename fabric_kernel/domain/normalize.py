"""
Boundary normalization (``fabric_kernel.domain.normalize``).

Responsibility
--------------
The record store holds loosely typed documents: camelCase keys, optional
fields, and numbers that may arrive as strings typed into a form or pasted
from a spreadsheet (``"87"``, ``"€ 12,50"``, ``""``).  This module is the
single place where such documents become typed records, and the single place
where typed records become documents again.

Invariants
----------
- Numeric parsing never raises: anything unparsable becomes ``Decimal(0)``.
- Parsing reads the longest leading number, so ``"12.5m"`` is ``12.5``.
- A roll's explicit price may be stored as ``price`` or ``manualPrice``.
- Orders persisted before ``stockDeducted`` existed are treated as deducted
  exactly when their status is Completed.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from fabric_kernel.domain.money import ZERO
from fabric_kernel.domain.records import (
    Contact,
    Expense,
    Fabric,
    Order,
    OrderItem,
    OrderStatus,
    Purchase,
    PurchaseItem,
    Roll,
)
from fabric_kernel.logging_config import get_logger

logger = get_logger("kernel.normalize")

_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_LEADING_INT = re.compile(r"[+-]?\d+")


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def parse_decimal(value: Any) -> Decimal:
    """Parse a caller-supplied number, defaulting to zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # str() keeps the shortest repr: 0.1 -> "0.1", not the binary expansion.
        result = Decimal(str(value))
        return result if result.is_finite() else ZERO

    text = "".join(str(value).replace("€", "").split())
    if "," in text and "." in text:
        # Whichever separator comes last is the decimal point.
        grouping = "." if text.rfind(",") > text.rfind(".") else ","
        text = text.replace(grouping, "")
    text = text.replace(",", ".", 1)
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return ZERO
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return ZERO


def parse_int(value: Any) -> int | None:
    """Parse a roll id; ``None`` when there is no leading integer."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        try:
            return int(value)
        except (ValueError, OverflowError, InvalidOperation):
            return None
    match = _LEADING_INT.match(str(value).strip())
    return int(match.group(0)) if match else None


def parse_status(value: Any) -> OrderStatus:
    """Parse an order status; unknown values fall back to Pending."""
    if isinstance(value, OrderStatus):
        return value
    for status in OrderStatus:
        if value == status.value:
            return status
    if value not in (None, ""):
        logger.warning("order_status_unrecognized", extra={"status": str(value)})
    return OrderStatus.PENDING


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _optional_text(value: Any) -> str | None:
    return None if value in (None, "") else str(value)


def _decimal_out(value: Decimal) -> str:
    return str(value)


# ---------------------------------------------------------------------------
# Fabrics and rolls
# ---------------------------------------------------------------------------


def roll_from_record(data: Mapping[str, Any]) -> Roll:
    price = parse_decimal(data.get("price"))
    if price == ZERO:
        price = parse_decimal(data.get("manualPrice"))
    original = data.get("originalMeters")
    return Roll(
        roll_id=parse_int(data.get("rollId")) or 0,
        sub_code=_text(data.get("subCode")),
        meters=parse_decimal(data.get("meters")),
        price=price,
        location=_text(data.get("location")),
        date_added=_optional_text(data.get("dateAdded")),
        original_meters=None if original in (None, "") else parse_decimal(original),
    )


def roll_to_record(roll: Roll) -> dict[str, Any]:
    record: dict[str, Any] = {
        "rollId": roll.roll_id,
        "subCode": roll.sub_code,
        "meters": _decimal_out(roll.meters),
        "location": roll.location,
        "price": _decimal_out(roll.price),
    }
    if roll.date_added is not None:
        record["dateAdded"] = roll.date_added
    if roll.original_meters is not None:
        record["originalMeters"] = _decimal_out(roll.original_meters)
    return record


def fabric_from_record(data: Mapping[str, Any], record_id: str | None = None) -> Fabric:
    rolls = data.get("rolls") or ()
    return Fabric(
        main_code=_text(data.get("mainCode")),
        name=_text(data.get("name")),
        color=_text(data.get("color")),
        rolls=tuple(roll_from_record(r) for r in rolls),
        image=_text(data.get("image")),
        record_id=record_id if record_id is not None else _optional_text(data.get("id")),
    )


def fabric_to_record(fabric: Fabric) -> dict[str, Any]:
    return {
        "mainCode": fabric.main_code,
        "name": fabric.name,
        "color": fabric.color,
        "image": fabric.image,
        "rolls": [roll_to_record(r) for r in fabric.rolls],
    }


def rolls_to_records(rolls: tuple[Roll, ...]) -> list[dict[str, Any]]:
    """Whole-array form of a fabric's rolls, as written back to the store."""
    return [roll_to_record(r) for r in rolls]


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------


def purchase_item_from_record(data: Mapping[str, Any]) -> PurchaseItem:
    meters = parse_decimal(data.get("meters"))
    price = parse_decimal(data.get("pricePerMeter"))
    total = data.get("totalPrice")
    return PurchaseItem(
        fabric_code=_text(data.get("fabricCode")),
        sub_code=_text(data.get("subCode")),
        meters=meters,
        price_per_meter=price,
        total_price=meters * price if total in (None, "") else parse_decimal(total),
    )


def purchase_from_record(data: Mapping[str, Any], record_id: str | None = None) -> Purchase:
    return Purchase(
        supplier=_text(data.get("supplier")),
        date=_text(data.get("date")),
        items=tuple(purchase_item_from_record(i) for i in data.get("items") or ()),
        vat_rate=parse_decimal(data.get("vatRate")),
        subtotal=parse_decimal(data.get("subtotal")),
        vat_amount=parse_decimal(data.get("vatAmount")),
        final_price=parse_decimal(data.get("finalPrice")),
        invoice_no=_text(data.get("invoiceNo")),
        record_id=record_id if record_id is not None else _optional_text(data.get("id")),
    )


def purchase_to_record(purchase: Purchase) -> dict[str, Any]:
    return {
        "invoiceNo": purchase.invoice_no,
        "supplier": purchase.supplier,
        "date": purchase.date,
        "vatRate": _decimal_out(purchase.vat_rate),
        "items": [
            {
                "fabricCode": i.fabric_code,
                "subCode": i.sub_code,
                "meters": _decimal_out(i.meters),
                "pricePerMeter": _decimal_out(i.price_per_meter),
                "totalPrice": _decimal_out(i.total_price),
            }
            for i in purchase.items
        ],
        "subtotal": _decimal_out(purchase.subtotal),
        "vatAmount": _decimal_out(purchase.vat_amount),
        "finalPrice": _decimal_out(purchase.final_price),
    }


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def order_item_from_record(data: Mapping[str, Any]) -> OrderItem:
    meters = parse_decimal(data.get("meters"))
    price = parse_decimal(data.get("pricePerMeter"))
    total = data.get("totalPrice")
    return OrderItem(
        fabric_code=_text(data.get("fabricCode")),
        roll_id=parse_int(data.get("rollId")),
        sub_code=_text(data.get("subCode")),
        meters=meters,
        price_per_meter=price,
        total_price=meters * price if total in (None, "") else parse_decimal(total),
    )


def order_from_record(data: Mapping[str, Any], record_id: str | None = None) -> Order:
    status = parse_status(data.get("status"))
    deducted = data.get("stockDeducted")
    return Order(
        customer=_text(data.get("customer")),
        date=_text(data.get("date")),
        items=tuple(order_item_from_record(i) for i in data.get("items") or ()),
        vat_rate=parse_decimal(data.get("vatRate")),
        status=status,
        subtotal=parse_decimal(data.get("subtotal")),
        vat_amount=parse_decimal(data.get("vatAmount")),
        final_price=parse_decimal(data.get("finalPrice")),
        invoice_no=_text(data.get("invoiceNo")),
        vat_number=_text(data.get("vatNumber")),
        stock_deducted=status is OrderStatus.COMPLETED if deducted is None else bool(deducted),
        record_id=record_id if record_id is not None else _optional_text(data.get("id")),
    )


def order_to_record(order: Order) -> dict[str, Any]:
    return {
        "invoiceNo": order.invoice_no,
        "customer": order.customer,
        "date": order.date,
        "vatRate": _decimal_out(order.vat_rate),
        "status": order.status.value,
        "items": [
            {
                "fabricCode": i.fabric_code,
                "rollId": i.roll_id,
                "subCode": i.sub_code,
                "meters": _decimal_out(i.meters),
                "pricePerMeter": _decimal_out(i.price_per_meter),
                "totalPrice": _decimal_out(i.total_price),
            }
            for i in order.items
        ],
        "subtotal": _decimal_out(order.subtotal),
        "vatAmount": _decimal_out(order.vat_amount),
        "finalPrice": _decimal_out(order.final_price),
        "vatNumber": order.vat_number,
        "stockDeducted": order.stock_deducted,
    }


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def expense_from_record(data: Mapping[str, Any], record_id: str | None = None) -> Expense:
    return Expense(
        company=_text(data.get("company")),
        date=_text(data.get("date")),
        description=_text(data.get("description")),
        net_price=parse_decimal(data.get("netPrice")),
        vat_rate=parse_decimal(data.get("vatRate")),
        vat_amount=parse_decimal(data.get("vatAmount")),
        final_price=parse_decimal(data.get("finalPrice")),
        invoice_no=_text(data.get("invoiceNo")),
        record_id=record_id if record_id is not None else _optional_text(data.get("id")),
    )


def expense_to_record(expense: Expense) -> dict[str, Any]:
    return {
        "invoiceNo": expense.invoice_no,
        "company": expense.company,
        "date": expense.date,
        "description": expense.description,
        "netPrice": _decimal_out(expense.net_price),
        "vatRate": _decimal_out(expense.vat_rate),
        "vatAmount": _decimal_out(expense.vat_amount),
        "finalPrice": _decimal_out(expense.final_price),
        "items": [
            {
                "description": expense.description,
                "netPrice": _decimal_out(expense.net_price),
                "totalPrice": _decimal_out(expense.final_price),
            }
        ],
    }


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------

# Spreadsheet column headers accepted for each field, first match wins.
_IMPORT_COLUMNS: dict[str, tuple[str, ...]] = {
    "name": ("Company", "Name"),
    "vat_number": ("VAT", "VatNumber"),
    "contact": ("Contact",),
    "email": ("Email",),
    "phone": ("Phone",),
    "address": ("Address",),
    "city": ("City",),
    "postal_code": ("PostalCode",),
    "iban": ("IBAN",),
}

UNKNOWN_CONTACT_NAME = "Unknown Name"


def contact_from_record(data: Mapping[str, Any], record_id: str | None = None) -> Contact:
    return Contact(
        name=_text(data.get("name")),
        contact=_text(data.get("contact")),
        email=_text(data.get("email")),
        phone=_text(data.get("phone")),
        vat_number=_text(data.get("vatNumber")),
        address=_text(data.get("address")),
        city=_text(data.get("city")),
        postal_code=_text(data.get("postalCode")),
        iban=_text(data.get("iban")),
        record_id=record_id if record_id is not None else _optional_text(data.get("id")),
    )


def contact_to_record(contact: Contact) -> dict[str, Any]:
    return {
        "name": contact.name,
        "contact": contact.contact,
        "email": contact.email,
        "phone": contact.phone,
        "vatNumber": contact.vat_number,
        "address": contact.address,
        "city": contact.city,
        "postalCode": contact.postal_code,
        "iban": contact.iban,
    }


def contact_from_import_row(row: Mapping[str, Any]) -> Contact:
    """
    Build a contact from one spreadsheet row.

    Headers follow the exported directory (``Company``, ``VAT``, ``IBAN``,
    ...).  Blank cells count as missing; a row without a name gets
    ``UNKNOWN_CONTACT_NAME``.
    """
    fields: dict[str, str] = {}
    for field, headers in _IMPORT_COLUMNS.items():
        value = next((row[h] for h in headers if row.get(h) not in (None, "")), "")
        fields[field] = str(value).strip()
    if not fields["name"]:
        fields["name"] = UNKNOWN_CONTACT_NAME
    return Contact(**fields)
