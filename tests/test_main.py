"""
Tests for the JSON loader and the command line driver
"""

import json
from decimal import Decimal

import pandas as pd
import pytest

from payment_allocator.errors import ValidationError
from payment_allocator.main import cli, load_instruments, load_orders, parse_instruments, parse_orders

ORDERS = [
    {"id": "ORDER1", "value": "100.00", "promotions": ["mZysk"]},
    {"id": "ORDER2", "value": "200.00", "promotions": ["BosBankrut"]},
    {"id": "ORDER3", "value": "150.00", "promotions": ["mZysk", "BosBankrut"]},
    {"id": "ORDER4", "value": "50.00"},
]
METHODS = [
    {"id": "PUNKTY", "discount": "15", "limit": "100.00"},
    {"id": "mZysk", "discount": "10", "limit": "180.00"},
    {"id": "BosBankrut", "discount": "5", "limit": "200.00"},
]


@pytest.fixture
def files(tmp_path):
    orders = tmp_path / "orders.json"
    methods = tmp_path / "paymentmethods.json"
    orders.write_text(json.dumps(ORDERS), encoding="utf-8")
    methods.write_text(json.dumps(METHODS), encoding="utf-8")
    return orders, methods


class TestLoader:
    """JSON input parsing"""

    def test_load(self, files):
        orders = load_orders(files[0])
        methods = load_instruments(files[1])
        assert [o.id for o in orders] == ["ORDER1", "ORDER2", "ORDER3", "ORDER4"]
        assert orders[3].promotions == ()
        assert orders[2].promotions == ("mZysk", "BosBankrut")
        assert methods[0].limit == Decimal("100.00")

    def test_json_numbers_stay_exact(self, tmp_path):
        path = tmp_path / "o.json"
        path.write_text('[{"id": "A", "value": 0.1}, {"id": "B", "value": 3}]', encoding="utf-8")
        orders = load_orders(path)
        assert orders[0].amount == Decimal("0.1")
        assert orders[1].amount == Decimal("3")

    def test_null_promotions(self):
        (order,) = parse_orders([{"id": "A", "value": "1", "promotions": None}])
        assert order.promotions == ()

    @pytest.mark.parametrize("rows", [
        [{"id": "A"}],
        [{"id": "A", "value": "-1"}],
        [{"id": "A", "value": "abc"}],
        ["A"],
        [{"id": "A", "value": "1", "promotions": "mZysk"}],
        [{"id": "A", "value": "NaN"}],
    ])
    def test_bad_orders(self, rows):
        with pytest.raises(ValidationError):
            parse_orders(rows)

    @pytest.mark.parametrize("row", [
        {"id": "X", "discount": "101", "limit": "1"},
        {"id": "X", "discount": "-1", "limit": "1"},
        {"id": "X", "discount": "5", "limit": "-1"},
        {"id": "X", "limit": "1"},
    ])
    def test_bad_methods(self, row):
        with pytest.raises(ValidationError):
            parse_instruments([row])


class TestCli:
    """End-to-end through cli()"""

    def test_prints_consumed(self, files, capsys):
        with pytest.raises(SystemExit) as exc:
            cli([str(files[0]), str(files[1]), "--log_level", "ERROR"])
        assert exc.value.code == 0
        out = capsys.readouterr().out.splitlines()
        assert out == ["PUNKTY 90.00", "mZysk 175.00", "BosBankrut 190.00"]

    def test_writes_payment_log(self, files, tmp_path):
        out_csv = tmp_path / "payments.csv"
        with pytest.raises(SystemExit) as exc:
            cli([str(files[0]), str(files[1]), "--out", str(out_csv), "--report", "--log_level", "ERROR"])
        assert exc.value.code == 0
        df = pd.read_csv(out_csv)
        assert set(df["order_id"]) == {"ORDER1", "ORDER2", "ORDER3", "ORDER4"}
        assert set(df["phase"]) == {"greedy"}

    def test_missing_file(self, files, tmp_path):
        with pytest.raises(SystemExit) as exc:
            cli([str(tmp_path / "nope.json"), str(files[1]), "--log_level", "ERROR"])
        assert exc.value.code == 2

    def test_missing_points_method(self, files, tmp_path):
        methods = tmp_path / "m.json"
        methods.write_text(json.dumps(METHODS[1:]), encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            cli([str(files[0]), str(methods), "--log_level", "ERROR"])
        assert exc.value.code == 1

    def test_usage_error(self):
        with pytest.raises(SystemExit) as exc:
            cli(["only-one.json"])
        assert exc.value.code == 2


class TestLoaderEdges:
    """Malformed values that must fail the load, not the run"""

    def test_json_nan_rejected(self, tmp_path):
        path = tmp_path / "o.json"
        path.write_text('[{"id": "A", "value": NaN}]', encoding="utf-8")
        with pytest.raises(ValidationError):
            load_orders(path)

    def test_infinite_limit_rejected(self):
        with pytest.raises(ValidationError):
            parse_instruments([{"id": "X", "discount": "5", "limit": "Infinity"}])

    def test_nan_exits_as_load_error(self, files, tmp_path):
        orders = tmp_path / "nan.json"
        orders.write_text('[{"id": "A", "value": NaN}]', encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            cli([str(orders), str(files[1]), "--log_level", "ERROR"])
        assert exc.value.code == 2
