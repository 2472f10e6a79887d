"""Tests for cases/bottles disambiguation."""

import pytest

from src.extractor.models import ProductCategory
from src.financial.models import SummaryTotals
from src.quantity import (
    QuantityDisambiguationEngine,
    ResolutionMethod,
    SolveStatus,
    enumerate_splits,
    preferred_split,
    rank_splits,
    solve_bucket,
)
from tests.conftest import make_item, make_raw_line


def pairs(candidates):
    return [c.as_tuple() for c in candidates]


class TestCandidates:

    @pytest.mark.parametrize("token, expected", [
        ("180", 2),
        ("1000", 3),
        ("1205", 2),
        ("12345", 3),
    ])
    def test_preferred_split(self, token, expected):
        assert preferred_split(token) == expected

    def test_bottles_never_reach_a_full_case(self):
        assert pairs(rank_splits("1800", 12)) == [(180, 0), (18, 0)]
        assert pairs(rank_splits("180", 12)) == [(18, 0)]

    def test_trailing_zeros_prefer_longer_cases(self):
        assert pairs(rank_splits("1000", 12)) == [(100, 0), (10, 0), (1, 0)]

    def test_two_digit_bottles_suffix(self):
        assert pairs(rank_splits("1205", 12)) == [(12, 5), (120, 5)]

    def test_equal_scores_prefer_larger_split(self):
        assert pairs(rank_splits("123456", 1000)) == [(1234, 56), (12345, 6), (123, 456)]

    def test_same_pair_reported_once(self):
        candidates = enumerate_splits("0050", 60)
        assert pairs(candidates) == [(0, 50), (5, 0)]
        assert candidates[0].split_index == 2

    def test_single_digit_is_whole_cases(self):
        assert pairs(enumerate_splits("7", 12)) == [(7, 0)]

    @pytest.mark.parametrize("token, pack", [("", 12), ("12a", 12), ("100", 0)])
    def test_unusable_input(self, token, pack):
        assert enumerate_splits(token, pack) == []

    def test_total_units(self):
        assert rank_splits("1205", 12)[0].total_units(12) == 149


class TestSolver:

    def test_unique_assignment(self):
        lines = [rank_splits("1800", 12), rank_splits("120", 12)]
        solution = solve_bucket(lines, 192, 0)

        assert solution.status is SolveStatus.UNIQUE
        assert solution.choices == (0, 0)

    def test_picks_lower_ranked_candidate_when_totals_require_it(self):
        lines = [rank_splits("1800", 12), rank_splits("120", 12)]
        assert solve_bucket(lines, 30, 0).choices == (1, 0)

    def test_ambiguous(self):
        lines = [rank_splits("100", 12), rank_splits("100", 12)]
        solution = solve_bucket(lines, 11, 0)

        assert solution.status is SolveStatus.AMBIGUOUS
        assert solution.choices is None

    def test_no_solution(self):
        assert solve_bucket([rank_splits("100", 12)], 5, 0).status is SolveStatus.NO_SOLUTION


class TestEngine:

    @pytest.fixture
    def engine(self):
        return QuantityDisambiguationEngine()

    def test_short_token_default_split(self, engine):
        item = engine.resolve_line(make_raw_line(quantity_token="180"))

        assert (item.cases, item.bottles) == (18, 0)
        assert item.resolution_method is ResolutionMethod.DEFAULT_SPLIT
        assert item.resolution_confidence == 0.6
        assert item.needs_review is False

    def test_long_token_default_split(self, engine):
        item = engine.resolve_line(make_raw_line(quantity_token="1800"))

        assert (item.cases, item.bottles) == (180, 0)
        assert item.resolution_confidence == 0.6

    def test_no_valid_reading_falls_back(self, engine, context):
        item = engine.resolve_line(make_raw_line(quantity_token="99", pack_quantity=6), context=context)

        assert (item.cases, item.bottles) == (0, 0)
        assert item.resolution_method is ResolutionMethod.FALLBACK
        assert item.resolution_confidence == 0.0
        assert item.needs_review is True
        assert "No valid cases/bottles reading of '99'" in context.warnings[0]

    def test_overlong_token_falls_back(self, engine):
        item = engine.resolve_line(make_raw_line(quantity_token="1" * 11))
        assert item.resolution_method is ResolutionMethod.FALLBACK

    def test_delimited_line_is_read_directly(self, engine):
        raw = make_raw_line(quantity_token="18", bottles_token="5", pack_quantity=48)
        assert pairs(engine.candidates_for(raw)) == [(18, 5)]

    def test_delimited_full_case_of_bottles_is_folded(self, engine, context):
        raw = make_raw_line(quantity_token="18", bottles_token="50", pack_quantity=48)

        assert pairs(engine.candidates_for(raw, context)) == [(19, 2)]
        assert "read as 19c/2b" in context.warnings[0]

    def test_summary_pins_every_bucket(self, engine, context):
        lines = [
            make_raw_line(quantity_token="1000"),
            make_raw_line(
                brand_number="0110", size_ml=180, pack_quantity=48, quantity_token="180",
                category=ProductCategory.IML, serial=2
            ),
        ]
        summary = SummaryTotals(18, 0, 100, 0, 118, 0)

        items = engine.resolve(lines, summary, context)

        assert [(i.item_id, i.cases, i.bottles) for i in items] == [(1, 100, 0), (2, 18, 0)]
        assert all(i.resolution_method is ResolutionMethod.SUMMARY_EXACT for i in items)
        assert all(i.resolution_confidence == 1.0 for i in items)
        assert context.warnings == []

    def test_summary_overrides_preferred_split(self, engine, context):
        summary = SummaryTotals(beer_cases=10, beer_bottles=0)
        items = engine.resolve([make_raw_line(quantity_token="1000")], summary, context)

        assert (items[0].cases, items[0].bottles) == (10, 0)
        assert items[0].resolution_method is ResolutionMethod.SUMMARY_EXACT

    def test_ambiguous_summary_keeps_default_splits(self, engine, context):
        lines = [make_raw_line(quantity_token="100"), make_raw_line(quantity_token="100", serial=2)]
        items = engine.resolve(lines, SummaryTotals(beer_cases=11, beer_bottles=0), context)

        assert [(i.cases, i.resolution_method) for i in items] == [
            (10, ResolutionMethod.DEFAULT_SPLIT),
            (10, ResolutionMethod.DEFAULT_SPLIT),
        ]
        assert "several readings match the printed totals" in context.warnings[0]

    def test_summary_bucket_without_lines(self, engine, context):
        summary = SummaryTotals(iml_cases=5, iml_bottles=0, beer_cases=100, beer_bottles=0)
        engine.resolve([make_raw_line(quantity_token="1000")], summary, context)

        assert context.warnings == [
            "[quantity]: Summary lists 5c/0b of IML but no IML lines were found"
        ]

    def test_cross_check_can_be_disabled(self, context):
        engine = QuantityDisambiguationEngine(summary_cross_check=False)
        summary = SummaryTotals(beer_cases=10, beer_bottles=0)
        items = engine.resolve([make_raw_line(quantity_token="1000")], summary, context)

        assert items[0].cases == 100
        assert items[0].resolution_method is ResolutionMethod.DEFAULT_SPLIT

    def test_trace_lists_candidates(self, engine, context):
        context.collect_trace = True
        engine.resolve([make_raw_line(quantity_token="1800")], None, context)

        entry = context.trace['quantity'][0]
        assert entry['candidates'] == [[180, 0, 0], [18, 0, -1]]
        assert entry['method'] == "default-split"


class TestResolvedLineItem:

    def test_total_units(self):
        assert make_item(cases=10, bottles=3).total_units == 123

    def test_bottles_must_be_below_pack(self):
        with pytest.raises(ValueError):
            make_item(bottles=12)

    def test_to_dict_flattens_line(self):
        data = make_item().to_dict()
        assert data['brand_number'] == "5016"
        assert data['resolution_method'] == "default-split"
        assert data['brand_match'] is None
