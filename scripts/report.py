#!/usr/bin/env python3
"""
Stock and financial report over the configured record store.

Prints warehouse value, per-fabric sub-batch breakdown and the dashboard
totals for an optional date range.

Usage:
    python3 scripts/report.py [--config settings.yaml] [--start 2026-01-01]
                              [--end 2026-03-31] [--method subcode_average]
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from fabric_config import load_settings
from fabric_engines.aggregation import subcode_summary
from fabric_engines.reporting import financial_summary, stock_summary
from fabric_engines.valuation import ValuationMethod, subcode_value
from fabric_kernel.db.engine import create_tables, init_engine_from_url
from fabric_kernel.domain.money import format_amount
from fabric_kernel.logging_config import configure_logging
from fabric_services.snapshot import load_snapshot
from fabric_services.store import SqlRecordStore

W = 60


def _row(label: str, value: str) -> str:
    return f"  {label:<{W - 20}}{value:>18}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Fabric stock and financial report")
    parser.add_argument("--config", type=str, default=None, help="Settings YAML file")
    parser.add_argument("--start", type=str, default=None, help="First date (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, default=None, help="Last date (YYYY-MM-DD)")
    parser.add_argument(
        "--method",
        choices=[m.value for m in ValuationMethod],
        default=None,
        help="Override the configured valuation method",
    )
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    configure_logging(level=settings.log_level)
    init_engine_from_url(settings.database_url)
    create_tables()

    method = ValuationMethod(args.method) if args.method else settings.valuation_method
    money = lambda v: format_amount(v, settings.currency_symbol)  # noqa: E731

    snapshot = load_snapshot(SqlRecordStore())
    stock = stock_summary(snapshot.fabrics, snapshot.orders, snapshot.purchases, method)

    print("=" * W)
    print("STOCK".center(W))
    print("=" * W)
    print(_row("Fabrics", str(stock.fabric_count)))
    print(_row("Rolls", str(stock.roll_count)))
    print(_row("Meters on hand", f"{stock.total_meters:.2f}"))
    print(_row(f"Stock value ({method.value})", money(stock.stock_value)))
    print(_row("Pending orders", f"{stock.pending_orders} / {stock.order_count}"))

    for fabric in snapshot.fabrics:
        if not fabric.rolls:
            continue
        print()
        print(f"  {fabric.main_code} {fabric.name} {fabric.color}".rstrip())
        for group in subcode_summary(
            fabric.rolls, fabric.main_code, snapshot.purchases, snapshot.fabrics
        ):
            label = f"    {group.sub_code or '-'} ({group.count} rolls, {group.meters:.2f} m)"
            value = subcode_value(
                fabric, group.sub_code, snapshot.purchases, snapshot.fabrics, method
            )
            print(_row(label, money(value)))

    summary = financial_summary(
        snapshot.purchases, snapshot.orders, snapshot.expenses, args.start, args.end
    )
    period = f"{args.start or '...'} to {args.end or '...'}"

    print()
    print("=" * W)
    print(f"FINANCIALS {period}".center(W))
    print("=" * W)
    print(_row("Revenue (net)", money(summary.total_revenue)))
    print(_row("Purchases (net)", money(summary.net_purchases)))
    print(_row("Expenses (net)", money(summary.expenses_net)))
    print(_row("Gross profit", money(summary.gross_profit)))
    print(_row("VAT collected", money(summary.vat_collected)))
    print(_row("VAT paid", money(summary.vat_paid)))
    print(_row("Cash out", money(summary.total_cash_out)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
