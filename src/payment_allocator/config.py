"""
Engine settings.

The CLI builds an AllocatorConfig from its flags; library callers can pass
one directly or rely on the defaults, which match the production input
format (loyalty account ``PUNKTY``, 10% points share on mixed payments).
"""

from dataclasses import dataclass
from decimal import Decimal

from .errors import ConfigurationError
from .models import POINTS_ID, to_decimal


@dataclass(frozen=True)
class AllocatorConfig:
    """
    Attributes:
        points_id: id of the loyalty-points instrument.
        points_share: fraction of an order paid with points in a mixed
            payment; also the discount ratio that payment earns.
        places: decimal places for discount ratios and reported amounts.
    """
    points_id: str = POINTS_ID
    points_share: Decimal = Decimal("0.1")
    places: int = 2

    def __post_init__(self):
        object.__setattr__(self, "points_share", to_decimal(self.points_share))
        if not self.points_id:
            raise ConfigurationError("points_id must be a non-empty string")
        if not (Decimal("0") < self.points_share < Decimal("1")):
            raise ConfigurationError(f"points_share must be in (0, 1), got {self.points_share}")
        if self.places < 0:
            raise ConfigurationError(f"places must be >= 0, got {self.places}")

    @property
    def card_share(self) -> Decimal:
        return Decimal("1") - self.points_share
