"""
Orchestrator: runs the optimised phases in order and, if any of them fails,
resets the ledger and pays every order with the flat, discount-free policy.

    INIT -> GREEDY -> FULL_FIT -> PARTIAL_FALLBACK -> DONE
    (failure)    * -> RESET -> FLAT_FALLBACK -> DONE

A failure in FLAT_FALLBACK propagates to the caller.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Set

import pandas as pd

from .candidates import generate_candidates
from .config import AllocatorConfig
from .errors import ConfigurationError
from .fallback import pay_all_flat, pay_full_card, pay_remaining_partial
from .greedy import select_greedily
from .ledger import Ledger
from .models import Order, Payment, PaymentInstrument, PhaseResult

logger = logging.getLogger(__name__)


class State(str, Enum):
    INIT = "INIT"
    GREEDY = "GREEDY"
    FULL_FIT = "FULL_FIT"
    PARTIAL_FALLBACK = "PARTIAL_FALLBACK"
    RESET = "RESET"
    FLAT_FALLBACK = "FLAT_FALLBACK"
    DONE = "DONE"


@dataclass
class AllocationResult:
    consumed: "OrderedDict[str, Decimal]"
    payments: List[Payment]
    paid: Set[str]
    states: List[State] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def used_fallback(self) -> bool:
        return State.RESET in self.states

    @property
    def total_discount(self) -> Decimal:
        return sum((p.discount for p in self.payments), Decimal("0"))

    def lines(self) -> List[str]:
        """``<instrument id> <amount>`` per instrument, in input order."""
        return [f"{iid} {amount}" for iid, amount in self.consumed.items()]

    def payments_frame(self) -> pd.DataFrame:
        cols = ["order_id", "instrument_id", "amount", "discount", "phase"]
        rows = [(p.order_id, p.instrument_id, p.amount, p.discount, p.phase) for p in self.payments]
        return pd.DataFrame(rows, columns=cols)


class Allocator:
    """
    Allocates instruments across a batch of orders.

    The Allocator mutates the ``used`` field of the instruments it is given;
    an instrument list must not be shared by concurrent runs. Use a fresh copy
    per run when the same inputs are allocated more than once, and call
    run() once per Allocator.
    """

    def __init__(self, orders: Iterable[Order], instruments: Iterable[PaymentInstrument],
                 cfg: Optional[AllocatorConfig] = None):
        self.cfg = cfg or AllocatorConfig()
        self.orders: List[Order] = list(orders)
        seen = set()
        for order in self.orders:
            if order.id in seen:
                raise ConfigurationError(f"duplicate order id {order.id!r}")
            seen.add(order.id)
        self.ledger = Ledger(instruments, points_id=self.cfg.points_id)
        self.states: List[State] = [State.INIT]

    def _enter(self, state: State) -> None:
        logger.debug(f"state {self.states[-1].value} -> {state.value}")
        self.states.append(state)

    def _run_optimised(self) -> PhaseResult:
        self._enter(State.GREEDY)
        candidates = generate_candidates(self.orders, self.ledger, self.cfg)
        res = select_greedily(candidates, self.ledger)
        if not res.ok:
            return res
        self._enter(State.FULL_FIT)
        res = pay_full_card(self.orders, self.ledger)
        if not res.ok:
            return res
        self._enter(State.PARTIAL_FALLBACK)
        return pay_remaining_partial(self.orders, self.ledger)

    def _run_flat(self) -> PhaseResult:
        self._enter(State.RESET)
        self.ledger.reset_all()
        self._enter(State.FLAT_FALLBACK)
        return pay_all_flat(self.orders, self.ledger)

    def run(self) -> AllocationResult:
        if self.states[-1] is State.DONE:
            raise RuntimeError("Allocator.run() already completed; create a new Allocator for another run")
        t0 = time.time()
        logger.info(f"allocating {len(self.orders):,} orders over {len(self.ledger.instruments):,} instruments")
        try:
            res = self._run_optimised()
            error = res.error
        except Exception as e:
            error = e
        if error is not None:
            logger.warning(f"optimised payment failed in {self.states[-1].value}: {error}")
            logger.warning("→ falling back to no-discount payment for ALL orders")
            self._run_flat()
        self._enter(State.DONE)

        result = AllocationResult(
            consumed=self.ledger.consumed(self.cfg.places),
            payments=list(self.ledger.payments),
            paid=set(self.ledger.paid),
            states=list(self.states),
            elapsed=time.time() - t0,
        )
        logger.info(f"✅ paid {len(result.paid):,} orders, total discount {result.total_discount}"
                    f"{' (flat fallback)' if result.used_fallback else ''} in {result.elapsed:.3f}s")
        return result


def allocate(orders: Iterable[Order], instruments: Iterable[PaymentInstrument],
             cfg: Optional[AllocatorConfig] = None) -> AllocationResult:
    """Run one allocation and return its result."""
    return Allocator(orders, instruments, cfg).run()
