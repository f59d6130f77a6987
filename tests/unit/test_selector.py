"""Unit tests for PerformerSelector."""

import itertools

import pytest

from volatility_scanner.core.models import VolatilityScore
from volatility_scanner.scanner.selector import PerformerSelector


def _scores(**kwargs):
    return {symbol: VolatilityScore(symbol, score) for symbol, score in kwargs.items()}


class TestPerformerSelector:
    def setup_method(self):
        self.selector = PerformerSelector()

    def test_defaults(self):
        assert self.selector.config["min_turnover"] == 10_000_000
        assert self.selector.config["tie_epsilon"] == 0.0001

    def test_picks_highest_score(self):
        scores = _scores(AUSDT=1.5, BUSDT=3.0, CUSDT=2.0)
        volumes = {"AUSDT": 50e6, "BUSDT": 20e6, "CUSDT": 90e6}

        result = self.selector.select(scores, volumes)

        assert result.symbol == "BUSDT"
        assert result.score == pytest.approx(3.0)
        assert result.moves == 300
        assert result.volume == 20e6
        assert result.has_winner

    def test_excludes_illiquid_even_if_best(self):
        scores = _scores(THINUSDT=9.0, AUSDT=1.0)
        volumes = {"THINUSDT": 9_999_999, "AUSDT": 10_000_000}

        result = self.selector.select(scores, volumes)

        assert result.symbol == "AUSDT"

    def test_missing_volume_is_excluded(self):
        result = self.selector.select(_scores(AUSDT=2.0), {})
        assert result.symbol is None

    def test_no_winner(self):
        result = self.selector.select(_scores(AUSDT=2.0), {"AUSDT": 1_000})

        assert result.symbol is None
        assert result.moves == 0
        assert not result.has_winner

    def test_empty_scores(self):
        assert self.selector.select({}, {"AUSDT": 50e6}).symbol is None

    @pytest.mark.parametrize("order", [("AUSDT", "BUSDT"), ("BUSDT", "AUSDT")])
    def test_near_tie_goes_to_higher_volume(self, order):
        values = {"AUSDT": 2.00005, "BUSDT": 2.0}
        scores = {s: VolatilityScore(s, values[s]) for s in order}
        volumes = {"AUSDT": 15e6, "BUSDT": 80e6}

        result = self.selector.select(scores, volumes)

        assert result.symbol == "BUSDT"

    def test_difference_above_epsilon_is_not_tie(self):
        scores = _scores(AUSDT=2.0002, BUSDT=2.0)
        volumes = {"AUSDT": 15e6, "BUSDT": 80e6}

        assert self.selector.select(scores, volumes).symbol == "AUSDT"

    def test_equal_score_and_volume_falls_back_to_symbol(self):
        scores = _scores(ZUSDT=1.0, MUSDT=1.0)
        volumes = {"ZUSDT": 20e6, "MUSDT": 20e6}

        assert self.selector.select(scores, volumes).symbol == "MUSDT"

    def test_rank_orders_all_liquid(self):
        scores = _scores(AUSDT=1.0, BUSDT=3.0, CUSDT=2.0, DUSDT=5.0)
        volumes = {"AUSDT": 20e6, "BUSDT": 20e6, "CUSDT": 20e6, "DUSDT": 1e6}

        ranked = self.selector.rank(scores, volumes)

        assert [s.symbol for s in ranked] == ["BUSDT", "CUSDT", "AUSDT"]

    def test_to_moves_rounds_half_up(self):
        assert PerformerSelector.to_moves(3.0) == 300
        assert PerformerSelector.to_moves(1.234) == 123
        assert PerformerSelector.to_moves(0.125) == 13
        assert PerformerSelector.to_moves(0.0) == 0

    def test_custom_config(self):
        selector = PerformerSelector({"min_turnover": 100})
        result = selector.select(_scores(AUSDT=1.0), {"AUSDT": 150})
        assert result.symbol == "AUSDT"
        assert selector.config["tie_epsilon"] == 0.0001

    @pytest.mark.parametrize("order", list(itertools.permutations(["AUSDT", "BUSDT", "CUSDT"])))
    def test_chained_near_tie_is_order_independent(self, order):
        # A ties B and B ties C, but C clears A by more than epsilon
        values = {"AUSDT": 1.0, "BUSDT": 1.00008, "CUSDT": 1.00016}
        volumes = {"AUSDT": 30e6, "BUSDT": 20e6, "CUSDT": 15e6}
        scores = {s: VolatilityScore(s, values[s]) for s in order}

        assert self.selector.select(scores, volumes).symbol == "BUSDT"
        assert [s.symbol for s in self.selector.rank(scores, volumes)] == ["BUSDT", "CUSDT", "AUSDT"]
