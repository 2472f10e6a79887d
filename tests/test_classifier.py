"""Tests for line grammars and the line classifier."""

import pytest

from src.classifier import LineClassifier, LineRole
from src.classifier.grammars import (
    BLOCK_DETAIL_GRAMMAR,
    BLOCK_HEADER_GRAMMAR,
    COMPACT_GRAMMAR,
    COMPACT_PACKED_GRAMMAR,
    DEFAULT_GRAMMARS,
    SUMMARY_GRAMMAR,
    TABLE_GRAMMAR,
)
from src.input_handler.document import DocumentLine, RawDocument
from tests.conftest import BLOCK_INVOICE, COMPACT_INVOICE, NO_PRODUCT_TEXT, TABLE_INVOICE


def classify_text(text):
    return LineClassifier().classify(RawDocument.from_text(text))


class TestProductGrammars:
    """Each product template captures the printed fields."""

    def test_compact_packed(self):
        fields = COMPACT_PACKED_GRAMMAR.match(
            "15016 (12)KING FISHER PREMIUM LAGER BEERBeerG12 / 650 ml1000"
        )
        assert fields['serial'] == "1"
        assert fields['brand_number'] == "5016"
        assert fields['header_pack'] == "12"
        assert fields['product_name'] == "KING FISHER PREMIUM LAGER BEER"
        assert fields['category'] == "Beer"
        assert fields['pack_type'] == "G"
        assert fields['pack_quantity'] == "12"
        assert fields['size_ml'] == "650"
        assert fields['quantity'] == "1000"
        assert 'bottles' not in fields

    def test_compact_without_pack_parentheses(self):
        fields = COMPACT_GRAMMAR.match("15016KING FISHER PREMIUM LAGER BEERBeerG12 / 650 ml1000")
        assert fields['brand_number'] == "5016"
        assert fields['quantity'] == "1000"
        assert COMPACT_GRAMMAR.match("15016 (12)KING FISHERBeerG12 / 650 ml1000") is None

    def test_compact_iml_category_next_to_pack_letter(self):
        fields = COMPACT_PACKED_GRAMMAR.match("20110 (48)OFFICER'S CHOICE WHISKYIMLG48 / 180 ml180")
        assert fields['category'] == "IML"
        assert fields['pack_type'] == "G"
        assert fields['quantity'] == "180"

    def test_table_has_separate_bottles_column(self):
        fields = TABLE_GRAMMAR.match(
            "1 5016 (12) KING FISHER PREMIUM LAGER BEER Beer G 12 / 650 ml 100 0"
        )
        assert fields['serial'] == "1"
        assert fields['product_name'] == "KING FISHER PREMIUM LAGER BEER"
        assert fields['quantity'] == "100"
        assert fields['bottles'] == "0"

    def test_block_header_with_and_without_pack(self):
        assert BLOCK_HEADER_GRAMMAR.match("15016 (12)") == {
            'serial': "1", 'brand_number': "5016", 'header_pack': "12"
        }
        assert BLOCK_HEADER_GRAMMAR.match("15016") == {'serial': "1", 'brand_number': "5016"}

    @pytest.mark.parametrize("line, quantity, bottles", [
        ("BeerG12/650ml6800", "6800", None),
        ("Beer G 12/650ml 680 0", "680", "0"),
    ])
    def test_block_detail(self, line, quantity, bottles):
        fields = BLOCK_DETAIL_GRAMMAR.match(line)
        assert fields['category'] == "Beer"
        assert fields['size_ml'] == "650"
        assert fields['quantity'] == quantity
        assert fields.get('bottles') == bottles

    def test_summary_body(self):
        fields = SUMMARY_GRAMMAR.match("Total (Cases/Btls):18 / 0291 / 0309 / 0")
        assert fields['body'] == "18 / 0291 / 0309 / 0"


def fixture_lines():
    lines = []
    for text in (COMPACT_INVOICE, TABLE_INVOICE, BLOCK_INVOICE, NO_PRODUCT_TEXT):
        lines.extend(line.text for line in classify_text(text).lines)
    return lines + [
        "TCS Signature",
        "TCS (1%):",
        "Retail Shop Excise Turnover Tax @ 10%:",
        "Authorised Signatory",
        "E & O.E.",
    ]


class TestGrammarExclusivity:
    """No line shape is claimed by two grammars."""

    @pytest.mark.parametrize("text", fixture_lines())
    def test_at_most_one_grammar_matches(self, text):
        matching = [grammar.name for grammar in DEFAULT_GRAMMARS if grammar.match(text) is not None]
        assert len(matching) <= 1, matching

    def test_signature_after_label_is_financial(self):
        line = LineClassifier().classify_line(DocumentLine(number=1, text="TCS Signature"))
        assert line.role is LineRole.FINANCIAL


class TestLineClassifier:
    """Roles assigned to whole documents."""

    @pytest.mark.parametrize("text, role", [
        ("ICDC Number: ICDC010706250123456", LineRole.HEADER),
        ("ICDC No.: ICDC010706250123456", LineRole.HEADER),
        ("Invoice Date: 06-Jun-2025", LineRole.HEADER),
        ("Invoice Value: 1,30,944.00", LineRole.FINANCIAL),
        ("Special Excise Cess:1,91,760.00", LineRole.FINANCIAL),
        ("TCS: 1,482.00", LineRole.FINANCIAL),
        ("1,30,944.00", LineRole.AMOUNT),
        ("Page 1 of 2", LineRole.FOOTER),
        ("Total (Cases/Btls):18 / 0291 / 0309 / 0", LineRole.SUMMARY),
        ("15016 (12)KING FISHER PREMIUM LAGER BEERBeerG12 / 650 ml1000", LineRole.PRODUCT),
        ("SRI LAKSHMI WINES", LineRole.UNCLASSIFIED),
    ])
    def test_classify_line(self, text, role):
        line = LineClassifier().classify_line(DocumentLine(number=1, text=text))
        assert line.role is role

    def test_unclassified_lines_have_no_grammar(self):
        line = LineClassifier().classify_line(DocumentLine(number=3, text="SRI LAKSHMI WINES"))
        assert line.grammar is None
        assert line.fields == {}

    def test_line_numbers_count_blank_lines(self):
        classified = classify_text("ICDC Number: ICDC010706250123456\n\n\nPage 1 of 1")
        assert [line.number for line in classified.lines] == [1, 4]

    def test_block_invoice_roles(self, block_invoice):
        counts = classify_text(block_invoice).role_counts()
        assert counts == {
            'amount': 1,
            'block_detail': 2,
            'block_header': 2,
            'financial': 1,
            'header': 2,
            'summary': 1,
            'unclassified': 3,
        }

    def test_by_role_keeps_source_order(self, compact_invoice):
        products = classify_text(compact_invoice).by_role(LineRole.PRODUCT)
        assert [line.fields['brand_number'] for line in products] == ["5016", "0110"]

    def test_diagnostics_are_plain_dicts(self, compact_invoice):
        rows = classify_text(compact_invoice).to_diagnostics()
        assert rows[0] == {
            'line': 1,
            'text': "ICDC Number: ICDC010706250123456",
            'role': "header",
            'grammar': "header",
        }


class TestLabelMerging:
    """Financial labels broken over several lines are re-joined."""

    def test_two_fragment_label(self):
        classified = classify_text("Invoice\nValue:\n1,30,944.00")
        assert [line.text for line in classified.lines] == ["Invoice Value:", "1,30,944.00"]
        assert classified.lines[0].number == 1
        assert classified.lines[0].role is LineRole.FINANCIAL

    def test_five_word_label(self):
        classified = classify_text("Retail\nShop\nExcise\nTurnover\nTax:\n12,100.00")
        assert classified.lines[0].text == "Retail Shop Excise Turnover Tax:"
        assert classified.lines[1].role is LineRole.AMOUNT

    def test_label_with_trailing_amount(self):
        classified = classify_text("Special Excise\nCess: 5,000.00")
        assert classified.lines[0].text == "Special Excise Cess: 5,000.00"
        assert len(classified.lines) == 1

    def test_product_name_lines_are_not_merged(self, block_invoice):
        texts = [line.text for line in classify_text(block_invoice).lines]
        assert "KING FISHER PREMIUM" in texts
        assert "LAGER BEER" in texts

    def test_complete_label_is_left_alone(self):
        lines = [DocumentLine(1, "TCS:"), DocumentLine(2, "Value:")]
        merged = LineClassifier().merge_label_fragments(lines)
        assert merged == lines
