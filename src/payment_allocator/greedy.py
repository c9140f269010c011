"""
Phase 1: discount-ranked greedy selection.

Candidates are ranked by discount ratio, then discount amount (both
descending); Python's sort is stable so remaining ties keep generation order.
The ranked list is walked once and the first affordable candidate of each
order is committed. There is no backtracking.
"""

from __future__ import annotations

import logging
from typing import List

from .ledger import Ledger
from .models import ZERO, Candidate, PhaseResult

logger = logging.getLogger(__name__)

PHASE = "greedy"


def rank_candidates(candidates: List[Candidate]) -> List[Candidate]:
    return sorted(candidates, key=lambda c: (c.discount_ratio, c.discount_amount), reverse=True)


def can_afford(candidate: Candidate, ledger: Ledger) -> bool:
    if candidate.points > ledger.points.remaining:
        return False
    return candidate.card_amount <= candidate.instrument.remaining


def commit(candidate: Candidate, ledger: Ledger) -> None:
    """Draw points first, then the instrument.

    The discount is logged on the draw it was taken off. A fully discounted
    draw is still logged with a zero amount so the order's total adds up.
    """
    oid = candidate.order.id
    discount = candidate.discount_amount
    if candidate.instrument.id == ledger.points_id:
        ledger.pay(oid, ledger.points_id, candidate.points, PHASE, discount)
    else:
        if candidate.points > ZERO:
            ledger.pay(oid, ledger.points_id, candidate.points, PHASE)
        ledger.pay(oid, candidate.instrument.id, candidate.card_amount, PHASE, discount)
    ledger.mark_paid(oid)


def select_greedily(candidates: List[Candidate], ledger: Ledger) -> PhaseResult:
    ranked = rank_candidates(candidates)
    logger.info(f"[{PHASE}] walking {len(ranked):,} ranked candidates")
    paid = 0
    for cand in ranked:
        if ledger.is_paid(cand.order.id):
            continue
        if not can_afford(cand, ledger):
            logger.debug(f"[{PHASE}] skip {cand.order.id} via {cand.instrument.id}: not affordable")
            continue
        commit(cand, ledger)
        paid += 1
    logger.info(f"[{PHASE}] paid {paid:,} orders")
    return PhaseResult(PHASE, paid=paid)
