"""End-to-end tests for InvoiceParser."""

import json
from decimal import Decimal

import pytest

from src.brand_resolution import BrandCatalog, MatchMethod
from src.pipeline import InvoiceParser, ParseResult, as_catalog, parse_invoice
from src.quantity import ResolutionMethod


@pytest.fixture
def parser():
    return InvoiceParser()


def quantities(result):
    return [(i.line.brand_number, i.cases, i.bottles) for i in result.items]


class TestCompactInvoice:

    def test_parse(self, parser, compact_invoice, catalog_rows):
        result = parser.parse(compact_invoice, catalog_rows)

        assert result.success is True
        assert result.invoice_number == "ICDC010706250123456"
        assert result.invoice_date == "2025-06-06"
        assert quantities(result) == [("5016", 100, 0), ("0110", 18, 0)]
        assert all(i.resolution_method is ResolutionMethod.SUMMARY_EXACT for i in result.items)
        assert [i.brand_match.master_brand_id for i in result.items] == [1, 2]
        assert all(i.brand_match.method is MatchMethod.EXACT for i in result.items)
        assert result.summary_validation.matched is True
        assert result.total_check.within_tolerance is True
        assert result.financial.total_amount == Decimal("149582.00")
        assert result.warnings == []
        assert result.review_items == []

    def test_totals(self, parser, compact_invoice):
        result = parser.parse(compact_invoice)

        assert result.item_count == 2
        assert result.total_cases == 118
        assert result.total_bottles == 0

    def test_without_catalog_every_item_needs_review(self, parser, compact_invoice):
        result = parser.parse(compact_invoice)

        assert len(result.review_items) == 2
        assert all(w.startswith("[brand] line") for w in result.warnings)

    def test_summary_mismatch_is_reported(self, parser, compact_invoice):
        text = compact_invoice.replace("18 / 0100 / 0118 / 0", "18 / 0090 / 0108 / 0")
        result = parser.parse(text)

        assert result.success is True
        assert result.items[0].cases == 100
        assert result.items[0].resolution_method is ResolutionMethod.DEFAULT_SPLIT
        assert result.summary_validation.matched is False
        assert any(w.startswith("[quantity]: Beer summary cross-check inconclusive") for w in result.warnings)
        assert any(w.startswith("[summary]: Line items") for w in result.warnings)


class TestOtherLayouts:

    def test_table_invoice(self, parser, table_invoice, catalog_rows):
        result = parser.parse(table_invoice, catalog_rows)

        assert result.invoice_date == "2025-06-10"
        assert quantities(result) == [("5016", 100, 0), ("0110", 18, 5)]
        assert all(i.resolution_method is ResolutionMethod.DEFAULT_SPLIT for i in result.items)
        assert result.summary_validation is None
        assert result.total_check.within_tolerance is False
        assert result.financial.total_amount == Decimal("51000.00")
        assert result.warnings == [
            "[financial]: Printed total 51000.00 differs from component sum 50500.00 "
            "by 500.00; printed total kept"
        ]

    def test_block_invoice(self, parser, block_invoice, catalog_rows):
        result = parser.parse(block_invoice, catalog_rows)

        assert quantities(result) == [("5016", 680, 0), ("0110", 18, 0)]
        assert all(i.resolution_confidence == 1.0 for i in result.items)
        assert result.items[0].line.product_name == "KING FISHER PREMIUM LAGER BEER"
        assert result.financial.invoice_value == Decimal("130944.00")
        assert result.financial.total_amount == Decimal("130944.00")
        assert result.financial.total_amount_derived is True
        assert result.warnings == []


class TestRejectedDocument:

    def test_no_product_lines(self, parser, no_product_text):
        result = parser.parse(no_product_text)

        assert result.success is False
        assert result.error == "No product lines recognised in document"
        assert result.items == []
        assert result.invoice_number == "ICDC010706250000000"

    def test_empty_text(self, parser):
        result = parser.parse("")

        assert result.success is False
        assert "[header]: Invoice number not found" in result.warnings


class TestSerialization:

    def test_json_is_deterministic(self, parser, compact_invoice, catalog_rows):
        first = parser.parse(compact_invoice, catalog_rows).to_json()
        second = InvoiceParser().parse(compact_invoice, catalog_rows).to_json()
        assert first == second

    def test_json_content(self, parser, compact_invoice, catalog_rows):
        data = json.loads(parser.parse(compact_invoice, catalog_rows).to_json())

        assert data['financial']['invoice_value'] == "130944.00"
        assert data['items'][0]['brand_match']['method'] == "exact"
        assert data['items'][0]['resolution_method'] == "summary-exact"
        assert data['summary'] == {
            'Beer': {'bottles': 0, 'cases': 100},
            'IML': {'bottles': 0, 'cases': 18},
            'Total': {'bottles': 0, 'cases': 118},
        }
        assert 'diagnostics' not in data

    def test_str(self, parser, no_product_text):
        text = str(parser.parse(no_product_text))
        assert text.startswith("ParseResult(ICDC010706250000000: FAILED")


class TestDiagnostics:

    def test_trace_is_collected_on_request(self, parser, compact_invoice):
        result = parser.parse(compact_invoice, collect_trace=True)

        assert result.diagnostics.raw_text == compact_invoice
        assert result.diagnostics.classification[4]['grammar'] == "compact_packed"
        assert set(result.diagnostics.trace) >= {'extractor', 'quantity'}

    def test_no_trace_by_default(self, parser, compact_invoice):
        assert parser.parse(compact_invoice).diagnostics is None

    def test_diagnostics_do_not_affect_equality(self, parser, compact_invoice):
        traced = parser.parse(compact_invoice, collect_trace=True)
        assert traced == parser.parse(compact_invoice)


class TestCatalogSnapshot:

    def test_as_catalog(self, catalog_rows):
        assert len(as_catalog(None)) == 0
        catalog = BrandCatalog.from_dicts(catalog_rows)
        assert as_catalog(catalog) is catalog
        assert len(as_catalog(catalog_rows)) == 3

    def test_parse_invoice(self, compact_invoice, catalog_rows):
        result = parse_invoice(compact_invoice, catalog_rows)

        assert isinstance(result, ParseResult)
        assert result.items[1].brand_match.brand_name == "OFFICER'S CHOICE WHISKY"
