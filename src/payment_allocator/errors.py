"""
Error taxonomy for the payment allocator.

Everything derives from ValueError so callers that already guard input
handling with ``except ValueError`` keep working.
"""


class AllocationError(ValueError):
    """Base class for every error raised by the allocator."""


class ValidationError(AllocationError):
    """A negative amount reached the ledger, or input data is malformed."""


class ConfigurationError(AllocationError):
    """The instrument collection cannot be used (no loyalty account, duplicate ids)."""


class CapacityExhaustedError(AllocationError):
    """The partial-points phase could not place an order.

    Raised inside the optimised pass only; the orchestrator answers it with a
    full reset and the flat fallback.
    """


class UnrecoverableCapacityError(AllocationError):
    """The flat fallback could not place an order's remainder. Fatal."""
