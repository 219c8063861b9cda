"""Tests for prediction resolution."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from hexroyale.actions.prediction import PredictionInput, percent_change, resolve_predictions
from hexroyale.core.enums import Asset, MarketDirection
from hexroyale.systems.market import MarketSnapshot


def _market(eth: float, btc: float = 64000.0) -> MarketSnapshot:
    return MarketSnapshot(prices={Asset.ETH: eth, Asset.BTC: btc, Asset.SOL: 150.0, Asset.MON: 1.0})


def _bet(direction: MarketDirection, stake: int = 100, asset: Asset = Asset.ETH) -> PredictionInput:
    return PredictionInput("agent-1", asset, direction, stake)


class TestPercentChange:
    def test_basic(self):
        assert percent_change(110.0, 100.0) == pytest.approx(10.0)
        assert percent_change(90.0, 100.0) == pytest.approx(-10.0)

    def test_non_positive_previous_is_flat(self):
        assert percent_change(100.0, 0.0) == 0.0
        assert percent_change(100.0, -5.0) == 0.0


class TestResolvePredictions:
    def test_correct_call_gains_stake(self):
        [res] = resolve_predictions([_bet(MarketDirection.UP)], _market(3232.0), _market(3200.0))
        assert res.hp_change == 100
        assert res.correct
        assert res.actual_change == pytest.approx(1.0)

    def test_wrong_call_loses_stake(self):
        [res] = resolve_predictions([_bet(MarketDirection.UP)], _market(3168.0), _market(3200.0))
        assert res.hp_change == -100
        assert not res.correct

    def test_down_call(self):
        [res] = resolve_predictions([_bet(MarketDirection.DOWN, 40)], _market(3000.0), _market(3200.0))
        assert res.hp_change == 40

    def test_flat_market_costs_nothing(self):
        for direction in MarketDirection:
            [res] = resolve_predictions([_bet(direction)], _market(3200.0), _market(3200.0))
            assert res.hp_change == 0
            assert not res.correct

    def test_move_below_threshold_is_flat(self):
        # 0.005% move
        [res] = resolve_predictions([_bet(MarketDirection.UP)], _market(3200.16), _market(3200.0))
        assert res.hp_change == 0

    def test_custom_threshold(self):
        [res] = resolve_predictions(
            [_bet(MarketDirection.UP)], _market(3232.0), _market(3200.0), flat_threshold=2.0,
        )
        assert res.hp_change == 0

    def test_missing_previous_price_is_flat(self):
        previous = MarketSnapshot(prices={Asset.BTC: 64000.0})
        [res] = resolve_predictions([_bet(MarketDirection.DOWN)], _market(100.0), previous)
        assert res.hp_change == 0

    def test_each_bet_uses_its_own_asset(self):
        results = resolve_predictions(
            [_bet(MarketDirection.UP, 10, Asset.ETH), _bet(MarketDirection.UP, 20, Asset.BTC)],
            _market(3300.0, btc=60000.0),
            _market(3200.0, btc=64000.0),
        )
        assert [r.hp_change for r in results] == [10, -20]
