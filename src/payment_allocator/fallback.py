"""
Fallback phases for orders the greedy pass left unpaid, and the flat,
discount-free strategy used after a full reset.

  - full-fit (phase 2): whole order on the best-fitting card, no discount
  - partial (phase 3): drain the largest card that is too small, rest in points
  - flat (phase 4): points first, remainder on the best-fitting card

Best-fit ties keep instrument input order (``min``/``max`` return the first
of equal keys).
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from .errors import CapacityExhaustedError, UnrecoverableCapacityError
from .ledger import Ledger
from .models import ZERO, Order, PaymentInstrument, PhaseResult

logger = logging.getLogger(__name__)


def find_min_fit_card(ledger: Ledger, amount: Decimal) -> Optional[PaymentInstrument]:
    """Card whose remaining capacity covers ``amount`` with the least slack."""
    fits = [c for c in ledger.cards() if c.remaining >= amount]
    if not fits:
        return None
    return min(fits, key=lambda c: c.remaining - amount)


def find_max_card_below(ledger: Ledger, amount: Decimal) -> Optional[PaymentInstrument]:
    """Card with the largest remaining capacity strictly below ``amount``."""
    below = [c for c in ledger.cards() if c.remaining < amount]
    if not below:
        return None
    return max(below, key=lambda c: c.remaining)


def unpaid_by_amount(orders: Iterable[Order], ledger: Ledger) -> List[Order]:
    """Unpaid orders, largest first (stable for equal amounts)."""
    return sorted((o for o in orders if not ledger.is_paid(o.id)), key=lambda o: o.amount, reverse=True)


# =====================================================================
# Phase 2: full card, no discount
# =====================================================================
def pay_full_card(orders: Iterable[Order], ledger: Ledger) -> PhaseResult:
    phase = "full_fit"
    pending = unpaid_by_amount(orders, ledger)
    logger.info(f"[{phase}] {len(pending):,} unpaid orders")
    paid = 0
    for order in pending:
        card = find_min_fit_card(ledger, order.amount)
        if card is None:
            logger.debug(f"[{phase}] {order.id}: no card fits {order.amount}, deferred")
            continue
        ledger.pay(order.id, card.id, order.amount, phase)
        ledger.mark_paid(order.id)
        paid += 1
    logger.info(f"[{phase}] paid {paid:,} orders")
    return PhaseResult(phase, paid=paid)


# =====================================================================
# Phase 3: drain one card, cover the shortfall with points
# =====================================================================
def pay_partial_points(order: Order, ledger: Ledger, phase: str = "partial") -> None:
    amount = order.amount
    card = find_max_card_below(ledger, amount)
    if card is None:
        raise CapacityExhaustedError(f"no card with remaining capacity below {amount} for order {order.id}")
    card_part = card.remaining
    required_points = amount - card_part
    if required_points > ledger.points.remaining:
        raise CapacityExhaustedError(
            f"order {order.id}: required points={required_points}, available={ledger.points.remaining}"
        )
    ledger.pay(order.id, card.id, card_part, phase)
    ledger.pay(order.id, ledger.points_id, required_points, phase)
    ledger.mark_paid(order.id)


def pay_remaining_partial(orders: Iterable[Order], ledger: Ledger) -> PhaseResult:
    phase = "partial"
    pending = unpaid_by_amount(orders, ledger)
    logger.info(f"[{phase}] {len(pending):,} unpaid orders")
    paid = 0
    for order in pending:
        try:
            pay_partial_points(order, ledger, phase)
        except CapacityExhaustedError as e:
            return PhaseResult.failed(phase, e, paid=paid)
        paid += 1
    logger.info(f"[{phase}] paid {paid:,} orders")
    return PhaseResult(phase, paid=paid)


# =====================================================================
# Phase 4: flat, discount-free (runs on a freshly reset ledger)
# =====================================================================
def pay_flat(order: Order, ledger: Ledger, phase: str = "flat") -> None:
    remainder = order.amount
    use_points = min(ledger.points.remaining, remainder)
    if use_points > ZERO:
        ledger.pay(order.id, ledger.points_id, use_points, phase)
        remainder -= use_points
    if remainder > ZERO:
        card = find_min_fit_card(ledger, remainder)
        if card is None:
            raise UnrecoverableCapacityError(f"no card available to pay {remainder} for order {order.id}")
        ledger.pay(order.id, card.id, remainder, phase)
    ledger.mark_paid(order.id)


def pay_all_flat(orders: Iterable[Order], ledger: Ledger) -> PhaseResult:
    """Pay every order in input order without discounts.

    Raises UnrecoverableCapacityError when an order cannot be placed.
    """
    phase = "flat"
    orders = list(orders)
    logger.info(f"[{phase}] paying {len(orders):,} orders without discount")
    for order in orders:
        pay_flat(order, ledger, phase)
    return PhaseResult(phase, paid=len(orders))
