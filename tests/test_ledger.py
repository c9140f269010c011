"""
Tests for instruments and the ledger
"""

from decimal import Decimal

import pytest

from payment_allocator.errors import ConfigurationError, ValidationError
from payment_allocator.ledger import Ledger
from payment_allocator.models import Order, Payment, PaymentInstrument


def make_ledger():
    return Ledger([
        PaymentInstrument("PUNKTY", "10", "80"),
        PaymentInstrument("C1", "20", "120"),
        PaymentInstrument("C2", "5", "39"),
    ])


class TestPaymentInstrument:
    """Remaining capacity and discount ratio"""

    def test_initial_remaining(self):
        card = PaymentInstrument("CARD", Decimal("15"), Decimal("100.00"))
        assert card.remaining == Decimal("100.00")
        assert card.used == Decimal("0")

    def test_discount_ratio(self):
        assert PaymentInstrument("CARD", "15", "100").discount_ratio() == Decimal("0.15")
        assert PaymentInstrument("X", "7", "50").discount_ratio() == Decimal("0.07")

    def test_discount_ratio_rounds_half_up(self):
        assert PaymentInstrument("X", "12.5", "50").discount_ratio() == Decimal("0.13")
        assert PaymentInstrument("Y", "12.49", "50").discount_ratio() == Decimal("0.12")


class TestLedger:
    """consume / reset / lookups"""

    def test_consume_reduces_remaining(self):
        ledger = Ledger([PaymentInstrument("PUNKTY", "0", "10"), PaymentInstrument("CARD", "15", "100.00")])
        ledger.consume("CARD", Decimal("30.50"))
        assert ledger.remaining("CARD") == Decimal("69.50")
        ledger.consume("CARD", Decimal("0.50"))
        assert ledger.remaining("CARD") == Decimal("69.00")

    def test_negative_consume_rejected_and_state_untouched(self):
        ledger = make_ledger()
        ledger.consume("C1", Decimal("10"))
        with pytest.raises(ValidationError):
            ledger.consume("C1", Decimal("-1"))
        assert ledger.get("C1").used == Decimal("10")

    def test_consume_does_not_check_capacity(self):
        ledger = make_ledger()
        ledger.consume("C2", Decimal("50"))
        assert ledger.remaining("C2") == Decimal("-11")

    def test_missing_points_instrument(self):
        with pytest.raises(ConfigurationError):
            Ledger([PaymentInstrument("CARD", "10", "100")])

    def test_custom_points_id(self):
        ledger = Ledger([PaymentInstrument("POINTS", "10", "100")], points_id="POINTS")
        assert ledger.points.id == "POINTS"
        assert ledger.cards() == []

    def test_duplicate_ids(self):
        with pytest.raises(ConfigurationError):
            Ledger([PaymentInstrument("PUNKTY", "10", "1"), PaymentInstrument("PUNKTY", "5", "2")])

    def test_cards_and_is_card(self):
        ledger = make_ledger()
        assert [c.id for c in ledger.cards()] == ["C1", "C2"]
        assert not ledger.is_card(None)
        assert not ledger.is_card(ledger.points)
        assert ledger.is_card(ledger.get("C1"))
        assert ledger.get("nope") is None

    def test_pay_logs_payment(self):
        ledger = make_ledger()
        ledger.pay("O1", "C1", Decimal("40"), "greedy", Decimal("10"))
        assert ledger.payments == [Payment("O1", "C1", Decimal("40"), "greedy", Decimal("10"))]
        assert ledger.remaining("C1") == Decimal("80")

    def test_reset_all_clears_attempt(self):
        ledger = make_ledger()
        ledger.pay("O1", "PUNKTY", Decimal("5"), "greedy")
        ledger.pay("O1", "C1", Decimal("40"), "greedy")
        ledger.mark_paid("O1")
        ledger.reset_all()
        assert all(i.used == 0 for i in ledger.instruments)
        assert ledger.paid == set()
        assert ledger.payments == []

    def test_reset_single(self):
        ledger = make_ledger()
        ledger.consume("C1", Decimal("40"))
        ledger.consume("C2", Decimal("1"))
        ledger.reset("C1")
        assert ledger.get("C1").used == 0
        assert ledger.get("C2").used == Decimal("1")

    def test_consumed_is_rounded_and_ordered(self):
        ledger = make_ledger()
        ledger.consume("C2", Decimal("1.005"))
        consumed = ledger.consumed()
        assert list(consumed) == ["PUNKTY", "C1", "C2"]
        assert consumed["C2"] == Decimal("1.01")
        assert str(consumed["PUNKTY"]) == "0.00"


class TestOrder:
    """Order construction"""

    def test_string_promotions_rejected(self):
        with pytest.raises(ValidationError):
            Order("A", "1", "mZysk")

    def test_promotions_become_tuple(self):
        assert Order("A", "1", ["x", "y"]).promotions == ("x", "y")
        assert Order("A", "1", None).promotions == ()
