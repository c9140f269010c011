"""
Payment Allocator Package

Greedy allocation of a loyalty-points account and discount cards across a
batch of orders, maximising the discount granted within every card's limit.
"""

__version__ = "0.1.0"

from .config import AllocatorConfig
from .engine import AllocationResult, Allocator, State, allocate
from .errors import (
    AllocationError,
    CapacityExhaustedError,
    ConfigurationError,
    UnrecoverableCapacityError,
    ValidationError,
)
from .ledger import Ledger
from .models import POINTS_ID, Candidate, Order, Payment, PaymentInstrument, PhaseResult

__all__ = [
    "allocate",
    "Allocator",
    "AllocationResult",
    "AllocatorConfig",
    "State",
    "Ledger",
    "Order",
    "PaymentInstrument",
    "Candidate",
    "Payment",
    "PhaseResult",
    "POINTS_ID",
    "AllocationError",
    "ValidationError",
    "ConfigurationError",
    "CapacityExhaustedError",
    "UnrecoverableCapacityError",
]
