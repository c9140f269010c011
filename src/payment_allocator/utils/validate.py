"""
Post-run invariant checks on an allocation result.
"""

import logging
from collections import Counter, defaultdict
from decimal import Decimal

logger = logging.getLogger(__name__)


def validate_result(result, orders, instruments):
    """Return a list of human-readable violations (empty when the run is sound).

    Checks that no instrument went over its limit, that every order was paid
    exactly once, and that each order's draws plus its discount equal the
    order value. ``instruments`` must be the objects the run mutated.
    """
    problems = []

    for inst in instruments:
        if inst.used > inst.limit:
            problems.append(f"{inst.id}: used {inst.used} exceeds limit {inst.limit}")

    ids = Counter(o.id for o in orders)
    for oid, n in ids.items():
        if n > 1:
            problems.append(f"order {oid} appears {n} times in input")
    missing = set(ids) - result.paid
    if missing:
        problems.append(f"{len(missing)} unpaid orders: {sorted(missing)}")
    extra = result.paid - set(ids)
    if extra:
        problems.append(f"paid-set contains unknown orders: {sorted(extra)}")

    totals = defaultdict(lambda: Decimal("0"))
    for p in result.payments:
        totals[p.order_id] += p.amount + p.discount
    for order in orders:
        if totals[order.id] != order.amount:
            problems.append(f"order {order.id}: paid+discount {totals[order.id]} != value {order.amount}")

    per_inst = defaultdict(lambda: Decimal("0"))
    for p in result.payments:
        per_inst[p.instrument_id] += p.amount
    for inst in instruments:
        if per_inst[inst.id] != inst.used:
            problems.append(f"{inst.id}: payment log {per_inst[inst.id]} != used {inst.used}")

    if problems:
        logger.error(f"❌ {len(problems)} invariant violations")
    else:
        logger.info("✅ allocation respects limits and pays every order exactly once")
    return problems
