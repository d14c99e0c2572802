"""Unit tests for line item normalization and totals"""

import logging
import pytest
from decimal import Decimal
from pydantic import ValidationError

from billing.exceptions import AmountOutOfRangeError
from billing.invoicing import calculate_total, line_total, normalize_line_items, number_or_zero
from billing.models.invoice import NormalizedLineItem


@pytest.mark.unit
class TestNormalizeLineItems:
    """normalize_line_items never raises and always returns a list"""

    @pytest.mark.parametrize("raw", [
        None,
        {},
        [],
        {"unit_price": "abc"},
        [{"item_name": "A", "unit_quantity": 1}, {"description": "B", "quantity": 2, "unit_price": 3}],
        ["loose string", 42, None, {"description": "ok", "quantity": 1, "unit_price": 1}],
        "not a list",
        12.5,
    ])
    def test_always_returns_list(self, raw):
        result = normalize_line_items(raw)
        assert isinstance(result, list)
        assert all(isinstance(item, NormalizedLineItem) for item in result)

    def test_null_is_empty(self):
        """Scenario: no line items gives an empty invoice"""
        assert normalize_line_items(None) == []
        assert calculate_total(normalize_line_items(None)) == 0

    def test_empty_object_becomes_one_zero_item(self):
        result = normalize_line_items({})
        assert result == [NormalizedLineItem(description="Item 1", quantity=0, unit_price=0)]

    def test_single_object_is_wrapped(self):
        result = normalize_line_items({"description": "Painting", "quantity": 4, "unit_price": 12.5})
        assert result == [NormalizedLineItem(description="Painting", quantity=4, unit_price=12.5)]

    def test_alternate_keys(self):
        """Scenario: item_name/unit_quantity map onto description/quantity"""
        result = normalize_line_items([{"item_name": "Tiling", "unit_quantity": 10, "unit_price": 15}])
        assert result == [NormalizedLineItem(description="Tiling", quantity=10, unit_price=15)]
        assert calculate_total(result) == 150

    def test_alias_equivalence(self):
        aliased = normalize_line_items([{"item_name": "X", "unit_quantity": 2, "unit_price": 5}])
        canonical = normalize_line_items([{"description": "X", "quantity": 2, "unit_price": 5}])
        assert aliased == canonical
        assert calculate_total(aliased) == calculate_total(canonical) == 10

    def test_canonical_key_wins_over_alias(self):
        result = normalize_line_items([
            {"description": "Primary", "item_name": "Alias", "quantity": 3, "unit_quantity": 9, "unit_price": 1}
        ])
        assert result[0].description == "Primary"
        assert result[0].quantity == 3

    def test_zero_quantity_does_not_fall_back_to_alias(self):
        result = normalize_line_items([{"description": "A", "quantity": 0, "unit_quantity": 5, "unit_price": 2}])
        assert result[0].quantity == 0

    def test_blank_description_uses_alias_then_label(self):
        result = normalize_line_items([
            {"description": "  ", "item_name": "From alias"},
            {"description": "", "unit_price": 1},
        ])
        assert result[0].description == "From alias"
        assert result[1].description == "Item 2"

    def test_numeric_strings(self):
        """Scenario: quantity "3" and unit price "2.5" total 7.5"""
        result = normalize_line_items([{"description": "A", "quantity": "3", "unit_price": "2.5"}])
        assert result[0].quantity == 3
        assert result[0].unit_price == 2.5
        assert calculate_total(result) == 7.5

    def test_non_numeric_values_become_zero(self):
        result = normalize_line_items([{"description": "A", "quantity": "abc", "unit_price": [1]}])
        assert result[0].quantity == 0
        assert result[0].unit_price == 0

    def test_non_object_entries_become_placeholders(self):
        result = normalize_line_items(["loose", {"description": "Real", "quantity": 2, "unit_price": 3}, None])
        assert [item.description for item in result] == ["Item 1", "Real", "Item 3"]
        assert result[0].quantity == 0 and result[0].unit_price == 0
        assert result[2].quantity == 0 and result[2].unit_price == 0
        assert calculate_total(result) == 6

    def test_order_is_preserved(self):
        raw = [{"description": str(i), "quantity": 1, "unit_price": i} for i in range(5)]
        assert [item.description for item in normalize_line_items(raw)] == ["0", "1", "2", "3", "4"]

    def test_coercion_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="billing.invoicing.line_items"):
            normalize_line_items([{"description": "A", "quantity": "lots", "unit_price": 1}, "junk"])
        messages = [r.getMessage() for r in caplog.records]
        assert any("non-numeric quantity" in m for m in messages)
        assert any("not an object" in m for m in messages)

    def test_non_finite_values_become_zero_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="billing.invoicing.line_items"):
            result = normalize_line_items([{"description": "A", "quantity": "1e400", "unit_price": "Infinity"}])
        assert result[0].quantity == 0
        assert result[0].unit_price == 0
        messages = [r.getMessage() for r in caplog.records]
        assert any("non-numeric quantity '1e400'" in m for m in messages)
        assert any("non-numeric unit_price 'Infinity'" in m for m in messages)

    def test_valid_values_are_not_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="billing.invoicing.line_items"):
            normalize_line_items([{"description": "A", "quantity": "0", "unit_price": 0}])
        assert caplog.records == []


@pytest.mark.unit
class TestNumberOrZero:

    @pytest.mark.parametrize("value, expected", [
        (5, 5.0),
        (2.5, 2.5),
        (Decimal("1.25"), 1.25),
        ("3", 3.0),
        (" 4.5 ", 4.5),
        ("", 0.0),
        ("abc", 0.0),
        ("1_000", 0.0),
        ("0x10", 0.0),
        (None, 0.0),
        (True, 1.0),
        (False, 0.0),
        (float("nan"), 0.0),
        ({}, 0.0),
        (-2, -2.0),
        ("Infinity", 0.0),
        ("-inf", 0.0),
        ("1e400", 0.0),
        (float("inf"), 0.0),
        (float("-inf"), 0.0),
        (Decimal("Infinity"), 0.0),
        (Decimal("sNaN"), 0.0),
        (10 ** 400, 0.0),
    ])
    def test_coercion(self, value, expected):
        assert number_or_zero(value) == expected


@pytest.mark.unit
class TestCalculateTotal:

    def test_empty(self):
        assert calculate_total([]) == 0
        assert calculate_total(None) == 0

    def test_sum_of_products(self, sample_line_items):
        items = normalize_line_items(sample_line_items)
        assert calculate_total(items) == sum(line_total(i) for i in items) == 150

    def test_negative_values_are_not_clamped(self):
        items = [
            NormalizedLineItem(description="Credit", quantity=1, unit_price=-20),
            NormalizedLineItem(description="Work", quantity=1, unit_price=50),
        ]
        assert calculate_total(items) == 30

    def test_not_rounded(self):
        items = [NormalizedLineItem(description="A", quantity=3, unit_price=0.1)]
        assert calculate_total(items) == pytest.approx(0.3)
        assert calculate_total(items) != 0.3  # float arithmetic, rounded only for display

    def test_overflowing_product_is_refused(self, caplog):
        items = normalize_line_items([{"description": "Huge", "quantity": 10, "unit_price": 1e308}])
        assert items[0].unit_price == 1e308

        with caplog.at_level(logging.WARNING, logger="billing.invoicing.line_items"):
            with pytest.raises(AmountOutOfRangeError) as exc_info:
                calculate_total(items)
        assert exc_info.value.status_code == 422
        assert any("overflowed" in r.getMessage() for r in caplog.records)

    def test_overflowing_sum_is_refused(self):
        items = [NormalizedLineItem(description=str(i), quantity=1, unit_price=1e308) for i in range(2)]
        with pytest.raises(AmountOutOfRangeError):
            calculate_total(items)

    @pytest.mark.parametrize("field", ["quantity", "unit_price"])
    def test_line_item_rejects_non_finite(self, field):
        with pytest.raises(ValidationError):
            NormalizedLineItem(description="A", **{field: float("inf")})
