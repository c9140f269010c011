#!/usr/bin/env python3
"""
Payment Allocator – command line driver

Reads orders and payment methods from JSON, runs the allocator and prints
the consumed amount per payment method:

    payment-allocator orders.json paymentmethods.json [--out payments.csv] [--report]

orders.json:          [{"id": "ORDER1", "value": "100.00", "promotions": ["mZysk"]}, ...]
paymentmethods.json:  [{"id": "PUNKTY", "discount": "15", "limit": "100.00"}, ...]
"""

from __future__ import annotations
import argparse, json, logging, sys
from decimal import Decimal, InvalidOperation
from typing import List

from .config import AllocatorConfig
from .engine import allocate
from .errors import AllocationError, ValidationError
from .models import HUNDRED, ZERO, Order, PaymentInstrument, to_decimal
from .utils.report import print_summary
from .utils.validate import validate_result

logger = logging.getLogger(__name__)


def _read_json(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f, parse_float=Decimal)


def _dec(value, what):
    try:
        d = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{what}: not a decimal number: {value!r}")
    if not d.is_finite():
        raise ValidationError(f"{what}: not a finite number: {value!r}")
    return d


def _need(row, keys, what):
    if not isinstance(row, dict):
        raise ValidationError(f"{what}: expected an object, got {type(row).__name__}")
    if (m := set(keys) - set(row)):
        raise ValidationError(f"{what} missing {m}")


def parse_orders(rows) -> List[Order]:
    orders = []
    for i, row in enumerate(rows):
        _need(row, ("id", "value"), f"order #{i}")
        amount = _dec(row["value"], f"order {row['id']}")
        if amount < ZERO:
            raise ValidationError(f"order {row['id']}: negative value {amount}")
        promotions = row.get("promotions") or []
        if not isinstance(promotions, list):
            raise ValidationError(f"order {row['id']}: promotions must be a list, got {type(promotions).__name__}")
        orders.append(Order(str(row["id"]), amount, tuple(str(p) for p in promotions)))
    return orders


def parse_instruments(rows) -> List[PaymentInstrument]:
    instruments = []
    for i, row in enumerate(rows):
        _need(row, ("id", "discount", "limit"), f"payment method #{i}")
        discount = _dec(row["discount"], f"payment method {row['id']} discount")
        limit = _dec(row["limit"], f"payment method {row['id']} limit")
        if not (ZERO <= discount <= HUNDRED):
            raise ValidationError(f"payment method {row['id']}: discount {discount} outside 0..100")
        if limit < ZERO:
            raise ValidationError(f"payment method {row['id']}: negative limit {limit}")
        instruments.append(PaymentInstrument(str(row["id"]), discount, limit))
    return instruments


def load_orders(path) -> List[Order]:
    return parse_orders(_read_json(path))


def load_instruments(path) -> List[PaymentInstrument]:
    return parse_instruments(_read_json(path))


# =====================================================================
# Driver
# =====================================================================
def main(cfg):
    try:
        orders = load_orders(cfg.orders)
        instruments = load_instruments(cfg.methods)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Failed to load input files: {e}")
        return 2
    logger.info(f"orders: {len(orders):,}   payment methods: {len(instruments):,}")

    acfg = AllocatorConfig(points_id=cfg.points_id, points_share=cfg.points_share)
    result = allocate(orders, instruments, acfg)

    for line in result.lines():
        print(line)

    if cfg.report:
        print_summary(result, orders, instruments)
        for problem in validate_result(result, orders, instruments):
            logger.error(f"❌ {problem}")

    if cfg.out:
        result.payments_frame().to_csv(cfg.out, index=False)
        logger.info(f"✅ wrote {cfg.out}")
    return 0


def _share(text):
    try:
        return Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a decimal number: {text!r}")


def cli(argv=None):
    ap = argparse.ArgumentParser(description="Allocate payment methods across orders to maximise discounts")
    ap.add_argument("orders", help="orders JSON file")
    ap.add_argument("methods", help="payment methods JSON file")
    ap.add_argument("--out", default=None, help="optional CSV path for the per-order payment log")
    ap.add_argument("--report", action="store_true", help="log utilisation summary and invariant checks")
    ap.add_argument("--points_id", default="PUNKTY", help="id of the loyalty-points payment method")
    ap.add_argument("--points_share", type=_share, default=Decimal("0.1"),
                    help="points share (and discount) of a mixed points/card payment")
    ap.add_argument("--log_level", choices=("DEBUG", "INFO", "WARNING", "ERROR"), default="INFO", help="logging level")
    cfg = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(getattr(logging, cfg.log_level))

    try:
        code = main(cfg)
    except AllocationError:
        logger.exception("Allocation failed")
        code = 1
    except Exception:
        logger.exception("Unhandled error during allocation run")
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    cli()
