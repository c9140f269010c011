"""
Shared fixtures.

Puts ``src/`` on sys.path so the tests also run from a plain checkout.
"""
import sys
from decimal import Decimal
from pathlib import Path

import pytest

src_root = Path(__file__).parent.parent / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from payment_allocator.models import Order, PaymentInstrument  # noqa: E402


def D(x):
    return Decimal(str(x))


@pytest.fixture
def example_orders():
    return [
        Order("ORDER1", D("100.00"), ["mZysk"]),
        Order("ORDER2", D("200.00"), ["BosBankrut"]),
        Order("ORDER3", D("150.00"), ["mZysk", "BosBankrut"]),
        Order("ORDER4", D("50.00")),
    ]


@pytest.fixture
def example_instruments():
    return [
        PaymentInstrument("PUNKTY", D("15"), D("100.00")),
        PaymentInstrument("mZysk", D("10"), D("180.00")),
        PaymentInstrument("BosBankrut", D("5"), D("200.00")),
    ]
