"""Tests for product line and header extraction."""

import pytest

from src.classifier import LineClassifier
from src.extractor import (
    FormatExtractor,
    HeaderExtractor,
    PackType,
    ProductCategory,
    normalize_category,
    normalize_pack_type,
    size_code_for,
)
from src.input_handler.document import RawDocument


def extract(text, context):
    classified = LineClassifier().classify(RawDocument.from_text(text))
    return FormatExtractor().extract(classified, context)


class TestNormalization:

    @pytest.mark.parametrize("token, category", [
        ("Beer", ProductCategory.BEER),
        ("IMFL", ProductCategory.IML),
        ("Duty Paid", ProductCategory.DUTY_PAID),
        ("DUTY_FREE", ProductCategory.DUTY_FREE),
    ])
    def test_known_categories(self, token, category):
        assert normalize_category(token) == (category, True)

    def test_unknown_category_defaults_to_iml(self):
        assert normalize_category("Wine") == (ProductCategory.IML, False)

    def test_pack_type(self):
        assert normalize_pack_type("c") == (PackType.CAN, True)
        assert normalize_pack_type("K") == (PackType.GLASS, False)

    def test_size_codes(self):
        assert size_code_for(750) == "QQ"
        assert size_code_for(333) == "XX"


class TestFormatExtractor:

    def test_compact_invoice(self, compact_invoice, context):
        lines = extract(compact_invoice, context)

        assert [line.brand_number for line in lines] == ["5016", "0110"]
        beer, whisky = lines
        assert beer.product_name == "KING FISHER PREMIUM LAGER BEER"
        assert beer.product_category is ProductCategory.BEER
        assert beer.pack_quantity == 12
        assert beer.size_ml == 650
        assert beer.quantity_token == "1000"
        assert beer.is_delimited is False
        assert beer.grammar == "compact_packed"
        assert whisky.product_category is ProductCategory.IML
        assert whisky.summary_bucket == "IML"
        assert context.warnings == []

    def test_table_invoice_keeps_bottles_column(self, table_invoice, context):
        lines = extract(table_invoice, context)

        assert [line.grammar for line in lines] == ["table", "table"]
        assert lines[1].quantity_token == "18"
        assert lines[1].bottles_token == "5"
        assert lines[1].is_delimited is True

    def test_block_invoice_joins_name_lines(self, block_invoice, context):
        lines = extract(block_invoice, context)

        assert [line.product_name for line in lines] == [
            "KING FISHER PREMIUM LAGER BEER",
            "OFFICERS CHOICE WHISKY",
        ]
        assert lines[0].grammar == "block"
        assert lines[0].serial == 1
        assert lines[0].quantity_token == "6800"
        # Quantity is read from the detail line
        assert lines[0].source_line_number == 6

    def test_unknown_category_is_defaulted_with_warning(self, context):
        lines = extract("40311 (12)SULA SHIRAZWineG12 / 750 ml10", context)

        assert lines[0].product_category is ProductCategory.IML
        assert context.warnings == [
            "[extractor] line 1: Unrecognized category 'Wine', defaulting to IML"
        ]

    def test_unknown_pack_type_is_defaulted_with_warning(self, context):
        lines = extract("30220 (24)BUDWEISER MAGNUMBeerK24 / 500 ml50", context)

        assert lines[0].pack_type is PackType.GLASS
        assert any("Unrecognized pack type 'K'" in w for w in context.warnings)

    def test_header_pack_wins_over_detail(self, context):
        lines = extract("15016 (24)\nKING FISHER\nBeerG12/650ml100", context)

        assert lines[0].pack_quantity == 24
        assert "disagrees with detail" in context.warnings[0]

    def test_zero_pack_line_is_dropped(self, context):
        lines = extract("15016 (0)KING FISHERBeerG0 / 650 ml10", context)

        assert lines == []
        assert context.warnings == ["[extractor] line 1: Pack quantity is zero; line skipped"]

    def test_duplicate_brand_lines_are_kept_and_flagged(self, context):
        text = (
            "15016 (12)KING FISHERBeerG12 / 650 ml100\n"
            "25016 (12)KING FISHERBeerG12 / 650 ml20"
        )
        lines = extract(text, context)

        assert len(lines) == 2
        assert len(context.warnings) == 2
        assert "appears 2 times" in context.warnings[0]

    def test_lines_sorted_by_serial(self, context):
        text = (
            "20110 (48)OFFICERS CHOICEIMLG48 / 180 ml180\n"
            "15016 (12)KING FISHERBeerG12 / 650 ml100"
        )
        assert [line.serial for line in extract(text, context)] == [1, 2]

    def test_orphan_detail_line_is_ignored(self, context):
        lines = extract("BeerG12/650ml100", context)

        assert lines == []
        assert "without a preceding brand header" in context.warnings[0]

    def test_block_without_detail_is_skipped(self, context):
        lines = extract("15016 (12)\nKING FISHER\nInvoice Value: 100.00", context)

        assert lines == []
        assert "has no detail line" in context.warnings[0]

    def test_trace_records_extracted_lines(self, compact_invoice, context):
        context.collect_trace = True
        extract(compact_invoice, context)

        assert [entry['brand_number'] for entry in context.trace['extractor']] == ["5016", "0110"]


class TestHeaderExtractor:

    def header_for(self, text, context):
        classified = LineClassifier().classify(RawDocument.from_text(text))
        return HeaderExtractor().extract(classified, context)

    def test_compact_header(self, compact_invoice, context):
        header = self.header_for(compact_invoice, context)

        assert header.invoice_number == "ICDC010706250123456"
        assert header.invoice_date == "2025-06-06"

    def test_numeric_date(self, table_invoice, context):
        assert self.header_for(table_invoice, context).invoice_date == "2025-06-10"

    def test_bare_invoice_number(self, context):
        header = self.header_for("Ref ICDC010706250123456 dated 06-Jun-2025", context)
        assert header.invoice_number == "ICDC010706250123456"

    def test_missing_fields_are_warnings(self, context):
        header = self.header_for("15016 (12)KING FISHERBeerG12 / 650 ml100", context)

        assert header.to_dict() == {'invoice_number': None, 'invoice_date': None}
        assert context.warnings == [
            "[header]: Invoice number not found",
            "[header]: Invoice date not found",
        ]
