"""
Data model for the payment allocator: orders, instruments, candidates and
the payments committed while allocating.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from .errors import ValidationError

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# reserved id of the loyalty-points account
POINTS_ID = "PUNKTY"


def to_decimal(value) -> Decimal:
    """Exact Decimal from a str/int/Decimal (floats go through str())."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value: Decimal, places: int = 2) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Order:
    id: str
    amount: Decimal
    promotions: Tuple[str, ...] = ()

    def __post_init__(self):
        if isinstance(self.promotions, str):
            raise ValidationError(f"order {self.id}: promotions must be a sequence of ids, not a string")
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "promotions", tuple(self.promotions or ()))


@dataclass
class PaymentInstrument:
    """
    A payment account with a spending limit and a discount percentage.

    ``used`` is the only mutable field; it is changed through the Ledger so
    that negative amounts are rejected in one place.
    """
    id: str
    discount: Decimal
    limit: Decimal
    used: Decimal = ZERO

    def __post_init__(self):
        self.discount = to_decimal(self.discount)
        self.limit = to_decimal(self.limit)
        self.used = to_decimal(self.used)

    @property
    def remaining(self) -> Decimal:
        return self.limit - self.used

    def discount_ratio(self, places: int = 2) -> Decimal:
        """Discount percentage as a fraction, rounded half-up (15 -> 0.15)."""
        return quantize(self.discount / HUNDRED, places)


@dataclass
class Candidate:
    """
    One proposed way to pay an order.

    The discount is taken off the instrument portion, or off the points
    portion when the order is paid with points only, so ``points`` and
    ``card_amount`` are what actually has to be drawn.
    """
    order: Order
    instrument: PaymentInstrument
    points: Decimal
    card_amount: Decimal
    discount_amount: Decimal
    discount_ratio: Decimal
    paid_with_points_only: bool = field(init=False)

    def __post_init__(self):
        self.paid_with_points_only = self.card_amount == ZERO
        if self.paid_with_points_only:
            self.points = self.points - self.discount_amount
        else:
            self.card_amount = self.card_amount - self.discount_amount


@dataclass(frozen=True)
class Payment:
    """A single committed draw from one instrument for one order."""
    order_id: str
    instrument_id: str
    amount: Decimal
    phase: str
    discount: Decimal = ZERO


@dataclass
class PhaseResult:
    """Outcome of one allocation phase."""
    phase: str
    paid: int = 0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, phase: str, error: Exception, paid: int = 0) -> "PhaseResult":
        return cls(phase=phase, paid=paid, error=error)
