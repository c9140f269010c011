"""
Instrument ledger: remaining-capacity queries and the consume/reset
mutations, plus the paid-set and payment log of the current attempt.

A Ledger owns its PaymentInstrument objects for the duration of a run and is
not safe to share between concurrent allocation runs.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .errors import ConfigurationError, ValidationError
from .models import POINTS_ID, ZERO, Payment, PaymentInstrument, quantize

logger = logging.getLogger(__name__)


class Ledger:
    def __init__(self, instruments: Iterable[PaymentInstrument], points_id: str = POINTS_ID):
        self.instruments: List[PaymentInstrument] = list(instruments)
        self.points_id = points_id
        self._by_id: Dict[str, PaymentInstrument] = {}
        for inst in self.instruments:
            if inst.id in self._by_id:
                raise ConfigurationError(f"duplicate instrument id {inst.id!r}")
            self._by_id[inst.id] = inst
        if points_id not in self._by_id:
            raise ConfigurationError(f"loyalty instrument {points_id!r} missing from instruments")
        self.paid: set = set()
        self.payments: List[Payment] = []

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------
    @property
    def points(self) -> PaymentInstrument:
        return self._by_id[self.points_id]

    def get(self, instrument_id: Optional[str]) -> Optional[PaymentInstrument]:
        return self._by_id.get(instrument_id)

    def is_card(self, inst: Optional[PaymentInstrument]) -> bool:
        """True for an existing, non-loyalty instrument."""
        return inst is not None and inst.id != self.points_id

    def cards(self) -> List[PaymentInstrument]:
        """Non-loyalty instruments, in input order."""
        return [inst for inst in self.instruments if inst.id != self.points_id]

    def remaining(self, instrument_id: str) -> Decimal:
        return self._by_id[instrument_id].remaining

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------
    def consume(self, instrument_id: str, amount) -> None:
        """Add ``amount`` to the instrument's used total.

        Capacity is not checked here: callers verify affordability before
        committing, and a candidate's portions are committed one at a time.
        """
        if amount is None or amount < ZERO:
            raise ValidationError(f"amount must be non-negative, got {amount!r} for {instrument_id!r}")
        inst = self._by_id[instrument_id]
        inst.used = inst.used + amount

    def pay(self, order_id: str, instrument_id: str, amount: Decimal, phase: str, discount: Decimal = ZERO) -> None:
        """Consume ``amount`` and record it in the payment log."""
        self.consume(instrument_id, amount)
        self.payments.append(Payment(order_id, instrument_id, amount, phase, discount))
        logger.debug(f"[{phase}] {order_id}: {amount} from {instrument_id} (discount {discount})")

    def mark_paid(self, order_id: str) -> None:
        self.paid.add(order_id)

    def is_paid(self, order_id: str) -> bool:
        return order_id in self.paid

    def reset(self, instrument_id: str) -> None:
        self._by_id[instrument_id].used = ZERO

    def reset_all(self) -> None:
        """Zero every instrument and forget the current attempt."""
        for inst in self.instruments:
            self.reset(inst.id)
        self.paid.clear()
        self.payments.clear()

    # ------------------------------------------------------------------
    # results
    # ------------------------------------------------------------------
    def consumed(self, places: int = 2) -> "OrderedDict[str, Decimal]":
        """Used amount per instrument, in input order, rounded half-up."""
        return OrderedDict((inst.id, quantize(inst.used, places)) for inst in self.instruments)
