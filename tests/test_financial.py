"""Tests for financial fields and the cases/bottles summary line."""

from decimal import Decimal

import pytest

from src.classifier import LineClassifier
from src.extractor.models import ProductCategory
from src.financial import (
    FinancialExtractor,
    FinancialFields,
    SummaryLineParser,
    SummaryTotals,
    validate_summary,
)
from src.input_handler.document import RawDocument
from tests.conftest import make_item


def extract_fields(text, context, **kwargs):
    classified = LineClassifier().classify(RawDocument.from_text(text))
    return FinancialExtractor(**kwargs).extract(classified, context)


class TestSummaryLineParser:

    @pytest.fixture
    def parser(self):
        return SummaryLineParser()

    def test_glued_summary(self, parser):
        totals = parser.parse("18 / 0291 / 0309 / 0")

        assert totals.bucket("IML") == (18, 0)
        assert totals.bucket("Beer") == (291, 0)
        assert totals.bucket("Total") == (309, 0)

    def test_glued_summary_with_bottles(self, parser):
        totals = parser.parse("10 / 520 / 330 / 8")

        assert totals.to_dict() == {
            'IML': {'cases': 10, 'bottles': 5},
            'Beer': {'cases': 20, 'bottles': 3},
            'Total': {'cases': 30, 'bottles': 8},
        }

    def test_separated_summary(self, parser):
        totals = parser.parse("18 0 291 0 309 0", line=40)

        assert totals.bucket("Beer") == (291, 0)
        assert totals.source_line == 40

    def test_separated_summary_that_does_not_add_up(self, parser, context):
        totals = parser.parse("18 0 291 0 300 0", context, line=40)

        assert totals.total_cases == 300
        assert context.warnings[0].startswith("[summary] line 40: Summary buckets do not add up")

    def test_grand_total_only(self, parser):
        totals = parser.parse("309 / 0")

        assert totals.bucket("IML") is None
        assert totals.bucket("Total") == (309, 0)

    def test_inconsistent_glued_summary(self, parser, context):
        assert parser.parse("0 / 0110 / 011 / 0", context) is None
        assert "no consistent readings" in context.warnings[0]

    def test_unrecognized_layout(self, parser, context):
        assert parser.parse("n/a", context) is None
        assert "Unrecognized summary layout" in context.warnings[0]


class TestValidateSummary:

    def test_matching_items(self):
        items = [
            make_item(item_id=1, cases=100),
            make_item(item_id=2, cases=18, category=ProductCategory.IML, pack_quantity=48),
        ]
        validation = validate_summary(items, SummaryTotals(18, 0, 100, 0, 118, 0))

        assert validation.matched is True
        assert validation.actual['Total'] == {'cases': 118, 'bottles': 0, 'units': 2064}

    def test_bottle_mismatch(self):
        items = [make_item(cases=100, bottles=1)]
        validation = validate_summary(items, SummaryTotals(beer_cases=100, beer_bottles=0))

        assert validation.matched is False
        assert list(validation.actual) == ["Beer"]

    def test_no_summary(self):
        assert validate_summary([make_item()], None) is None


class TestFinancialExtractor:

    def test_compact_invoice(self, compact_invoice, context, money):
        fields = extract_fields(compact_invoice, context)

        assert fields.invoice_value == money("130944.00")
        assert fields.mrp_rounding_off == money("56.00")
        assert fields.net_invoice_value == money("131000.00")
        assert fields.retail_shop_excise_tax == money("12500.00")
        assert fields.retail_excise_turnover_tax == money("12100.00")
        assert fields.special_excise_cess == money("5000.00")
        assert fields.tcs == money("1482.00")
        assert fields.total_amount == money("149582.00")
        assert context.warnings == []

    def test_same_line_amount_without_space(self, context, money):
        fields = extract_fields("Special Excise Cess:1,91,760.00", context)
        assert fields.special_excise_cess == money("191760.00")

    def test_split_line_amount(self, context, money):
        fields = extract_fields("Retail Shop Excise Turnover Tax:\n1,30,944.00", context)
        assert fields.retail_excise_turnover_tax == money("130944.00")

    def test_rate_in_label_is_not_the_amount(self, context, money):
        fields = extract_fields("Invoice Value: 1,000.00\nTCS (1%):\n10.00", context)

        assert fields.invoice_value == money("1000.00")
        assert fields.tcs == money("10.00")
        assert context.warnings == []

    def test_percentage_label_reads_next_line(self, context, money):
        fields = extract_fields("Retail Shop Excise Turnover Tax @ 10%:\n1,30,944.00", context)
        assert fields.retail_excise_turnover_tax == money("130944.00")

    def test_block_amounts_follow_label_order(self, context, money):
        text = "Invoice Value:\nMRP Rounding Off:\n13,09,438.00\n75,794.40"
        fields = extract_fields(text, context)

        assert fields.invoice_value == money("1309438.00")
        assert fields.mrp_rounding_off == money("75794.40")

    def test_label_split_over_lines(self, block_invoice, context, money):
        fields = extract_fields(block_invoice, context)
        assert fields.invoice_value == money("130944.00")

    def test_label_without_amount(self, context):
        fields = extract_fields("Invoice Value: 100.00\nTCS:", context)

        assert fields.tcs is None
        assert context.warnings == ["[financial] line 2: No amount found for 'tcs'"]

    def test_amount_outside_lookahead(self, context):
        text = "TCS:\nSRI LAKSHMI WINES\nHYDERABAD\n1,482.00"
        fields = extract_fields(text, context, lookahead_lines=2)

        assert fields.tcs is None
        assert "No amount found for 'tcs'" in context.warnings[0]


class TestCrossValidation:

    @pytest.fixture
    def extractor(self):
        return FinancialExtractor()

    def test_total_agrees(self, extractor, context):
        fields = FinancialFields(invoice_value=Decimal("100.00"), tcs=Decimal("1.00"),
                                 total_amount=Decimal("101.50"))
        fields, check = extractor.cross_validate(fields, context)

        assert check.within_tolerance is True
        assert check.difference == Decimal("0.50")
        assert context.warnings == []

    def test_total_disagrees(self, extractor, context):
        fields = FinancialFields(invoice_value=Decimal("50000.00"), tcs=Decimal("500.00"),
                                 total_amount=Decimal("51000.00"))
        fields, check = extractor.cross_validate(fields, context)

        assert check.within_tolerance is False
        assert fields.total_amount == Decimal("51000.00")
        assert "differs from component sum 50500.00" in context.warnings[0]

    def test_net_value_disagrees(self, extractor, context):
        fields = FinancialFields(invoice_value=Decimal("130944.00"), mrp_rounding_off=Decimal("56.00"),
                                 net_invoice_value=Decimal("131500.00"))
        extractor.cross_validate(fields, context)

        assert context.warnings == [
            "[financial]: Net invoice value 131500.00 differs from invoice value plus "
            "MRP rounding 131000.00 by 500.00"
        ]

    def test_net_value_within_tolerance(self, extractor, context):
        fields = FinancialFields(invoice_value=Decimal("130944.00"), mrp_rounding_off=Decimal("56.00"),
                                 net_invoice_value=Decimal("131000.50"))
        extractor.cross_validate(fields, context)

        assert context.warnings == []

    def test_missing_total_is_derived(self, extractor, context):
        fields = FinancialFields(invoice_value=Decimal("130944.00"))
        fields, check = extractor.cross_validate(fields, context)

        assert fields.total_amount == Decimal("130944.00")
        assert fields.total_amount_derived is True
        assert check.printed is None

    def test_nothing_to_check(self, extractor, context):
        fields, check = extractor.cross_validate(FinancialFields(), context)

        assert fields.total_amount is None
        assert check.derived is None

    def test_serialized_amounts_are_strings(self):
        data = FinancialFields(tcs=Decimal("1482.00")).to_dict()
        assert data['tcs'] == "1482.00"
        assert data['invoice_value'] is None
