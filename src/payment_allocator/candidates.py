"""
Candidate generation.

For every order, in input order, the financially valid ways to pay it are
emitted in a fixed sequence: promotion instruments (as listed on the order),
points only, then the points/card split for every card in instrument order.
That sequence is the final tie-break of the greedy ranking.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from .config import AllocatorConfig
from .ledger import Ledger
from .models import ZERO, Candidate, Order, PaymentInstrument

logger = logging.getLogger(__name__)


def fits_after_discount(inst: PaymentInstrument, amount: Decimal, places: int = 2) -> bool:
    """Limit covers ``amount`` once the instrument's own discount is applied (inclusive)."""
    discounted = amount - amount * inst.discount_ratio(places)
    return inst.limit >= discounted


def make_candidate(order: Order, inst: PaymentInstrument, points: Decimal, card_amount: Decimal,
                   ratio: Decimal) -> Candidate:
    return Candidate(order, inst, points, card_amount, order.amount * ratio, ratio)


def promotion_candidates(order: Order, ledger: Ledger, places: int = 2) -> List[Candidate]:
    out = []
    for promo_id in order.promotions:
        inst: Optional[PaymentInstrument] = ledger.get(promo_id)
        if not ledger.is_card(inst):
            continue
        if fits_after_discount(inst, order.amount, places):
            out.append(make_candidate(order, inst, ZERO, order.amount, inst.discount_ratio(places)))
    return out


def points_candidate(order: Order, ledger: Ledger, places: int = 2) -> Optional[Candidate]:
    points = ledger.points
    if not fits_after_discount(points, order.amount, places):
        return None
    return make_candidate(order, points, order.amount, ZERO, points.discount_ratio(places))


def mixed_candidates(order: Order, ledger: Ledger, cfg: AllocatorConfig) -> List[Candidate]:
    points_amount = order.amount * cfg.points_share
    card_amount = order.amount * cfg.card_share
    if ledger.points.limit < points_amount:
        return []
    # the card carries its share minus the discount earned by paying with points
    card_after_discount = card_amount - points_amount
    return [
        make_candidate(order, inst, points_amount, card_amount, cfg.points_share)
        for inst in ledger.cards()
        if inst.limit >= card_after_discount
    ]


def generate_candidates(orders: Iterable[Order], ledger: Ledger, cfg: Optional[AllocatorConfig] = None) -> List[Candidate]:
    cfg = cfg or AllocatorConfig(points_id=ledger.points_id)
    candidates: List[Candidate] = []
    for order in orders:
        before = len(candidates)
        candidates.extend(promotion_candidates(order, ledger, cfg.places))
        pc = points_candidate(order, ledger, cfg.places)
        if pc is not None:
            candidates.append(pc)
        candidates.extend(mixed_candidates(order, ledger, cfg))
        if len(candidates) == before:
            logger.debug(f"[candidates] {order.id}: no candidate, left to fallback phases")
    logger.info(f"[candidates] {len(candidates):,} candidates generated")
    return candidates
