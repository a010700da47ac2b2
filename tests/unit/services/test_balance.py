"""Tests for the balance accumulator."""

from datetime import datetime

import pytest

from stockledger.core.entities import (
    Category,
    EntityKind,
    InflowRecord,
    Material,
    LossRecord,
    OutflowRecord,
    Sale,
    SaleLine,
    StockSnapshotRecord,
)
from stockledger.core.exceptions import InsufficientStockError, ValidationError
from stockledger.core.services import (
    DEFAULT_SIGNS,
    accumulate,
    current_quantities,
    ensure_available,
    low_stock,
    magnitudes,
    sales_to_movements,
    stock_value,
)


def _inflow(category, quantity, entity_id="flour", branch_id="1"):
    return InflowRecord(category=category, entity_id=entity_id, branch_id=branch_id, quantity=quantity)


def _outflow(category, quantity, entity_id="flour", branch_id="1"):
    return OutflowRecord(category=category, entity_id=entity_id, branch_id=branch_id, quantity=quantity)


def _loss(category, quantity, entity_id="flour", branch_id="1"):
    return LossRecord(category=category, entity_id=entity_id, branch_id=branch_id, quantity=quantity)


class TestAccumulate:
    def test_empty(self):
        assert accumulate([]) == 0

    def test_single_damage_is_negative(self):
        assert accumulate([_loss(Category.DAMAGE_OUT, 7)]) == -7

    def test_fixed_signs(self):
        records = [
            StockSnapshotRecord(category=Category.OPENING, entity_id="flour", branch_id="1", quantity=100),
            _inflow(Category.PROCUREMENT_IN, 50),
            _inflow(Category.TRANSFER_IN, 10),
            _inflow(Category.PRODUCTION_IN, 5),
            _outflow(Category.TRANSFER_OUT, 4),
            _outflow(Category.USAGE_OUT, 30),
            _loss(Category.DAMAGE_OUT, 2),
            _outflow(Category.SALES_OUT, 6),
            _loss(Category.COMPLIMENTARY_OUT, 1),
        ]
        assert accumulate(records) == 100 + 50 + 10 + 5 - 4 - 30 - 2 - 6 - 1

    def test_closing_snapshots_ignored(self):
        closing = StockSnapshotRecord(
            category=Category.CLOSING, entity_id="flour", branch_id="1", quantity=500
        )
        assert Category.CLOSING not in DEFAULT_SIGNS
        assert accumulate([closing]) == 0

    def test_malformed_quantity_counts_as_zero(self):
        records = [_inflow(Category.PROCUREMENT_IN, "oops"), _inflow(Category.PROCUREMENT_IN, 3)]
        assert accumulate(records) == 3

    def test_custom_sign_map(self):
        records = [_loss(Category.DAMAGE_OUT, 2), _loss(Category.DAMAGE_OUT, 3)]
        assert accumulate(records, magnitudes(Category.DAMAGE_OUT)) == 5

    def test_sign_map_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_SIGNS[Category.OPENING] = -1  # type: ignore[index]


class TestCurrentQuantities:
    def test_per_entity(self):
        records = [
            _inflow(Category.PROCUREMENT_IN, 10, "flour"),
            _outflow(Category.USAGE_OUT, 4, "flour"),
            _inflow(Category.PROCUREMENT_IN, 3, "sugar"),
        ]
        assert current_quantities(records) == {"flour": 6, "sugar": 3}

    def test_branch_and_kind_scoping(self):
        product = InflowRecord(
            category=Category.PRODUCTION_IN,
            entity_id="bread",
            entity_kind=EntityKind.PRODUCT,
            branch_id="1",
            quantity=20,
        )
        records = [
            _inflow(Category.PROCUREMENT_IN, 10, "flour", "1"),
            _inflow(Category.PROCUREMENT_IN, 99, "flour", "2"),
            product,
        ]
        assert current_quantities(records, EntityKind.MATERIAL, "1") == {"flour": 10}
        assert current_quantities(records, EntityKind.PRODUCT) == {"bread": 20}


class TestSalesToMovements:
    def test_lines_become_sales_out(self):
        sale = Sale(
            id=1,
            branch_id="2",
            created_at=datetime(2024, 1, 5, 12),
            items=[
                SaleLine(product_id="bread", quantity=3, total_cost=4.5),
                SaleLine(product_id=None, quantity=1),
            ],
        )
        movements = sales_to_movements([sale])
        assert len(movements) == 1
        movement = movements[0]
        assert movement.category is Category.SALES_OUT
        assert movement.entity_kind is EntityKind.PRODUCT
        assert movement.branch_id == "2"
        assert movement.quantity == 3
        assert accumulate(movements) == -3

    def test_sale_without_branch_skipped(self):
        sale = Sale(id=1, items=[SaleLine(product_id="bread", quantity=3)])
        assert sales_to_movements([sale]) == []


class TestEnsureAvailable:
    def test_within_available(self):
        ensure_available("flour", available=10, requested=10)

    def test_exceeds_available(self):
        with pytest.raises(InsufficientStockError) as exc_info:
            ensure_available("flour", available=10, requested=12, branch_id="1")
        assert exc_info.value.details["available"] == 10
        assert exc_info.value.details["branch_id"] == "1"

    @pytest.mark.parametrize("requested", [0, -5])
    def test_non_positive_rejected(self, requested):
        with pytest.raises(ValidationError):
            ensure_available("flour", available=10, requested=requested)


class TestLowStock:
    @pytest.fixture
    def materials(self):
        return [
            Material(id="flour", minimum_stock=150),
            Material(id="sugar", minimum_stock=10),
            Material(id="salt", minimum_stock=5),
            Material(id="yeast"),
        ]

    def test_at_or_below_minimum(self, materials):
        quantities = {"flour": 120.0, "sugar": 10.0}
        assert low_stock(quantities, materials) == ["flour", "sugar"]

    def test_exactly_zero_excluded(self, materials):
        # salt never moved, yeast sits at zero
        assert low_stock({"yeast": 0.0}, materials) == []

    def test_missing_minimum_counts_as_zero(self, materials):
        assert low_stock({"yeast": -2.0, "flour": 200.0}, materials) == ["yeast"]


class TestStockValue:
    def test_price_times_quantity(self):
        prices = {"flour": 2.0, "sugar": 3.0}
        assert stock_value({"flour": 120.0, "sugar": 45.0}, prices.get) == 375.0

    def test_negative_quantity_reduces_value(self):
        assert stock_value({"flour": 10.0, "sugar": -5.0}, lambda _: 2.0) == 10.0

    def test_empty(self):
        assert stock_value({}, lambda _: 2.0) == 0
