"""Tests for the bar-by-bar trade simulator."""
import logging

import numpy as np
import pytest

from conftest import always, build_series, never, once
from stratsel.backtest import TradeSimulator, position_size, risk_levels
from stratsel.backtest.metrics import exit_reason_counts, total_profit_loss
from stratsel.config import SimulationConfig
from stratsel.strategies import FunctionStrategy
from stratsel.strategies.builtin import BreakoutMomentum, RsiReversal, SmaCrossover
from stratsel.types import Direction, ExitReason, StrategyStats


def test_empty_series_gives_zero_stats():
    stats = TradeSimulator().simulate([], [], always())
    assert stats == StrategyStats(trades=0, wins=0, losses=0, win_rate=0, avg_duration=0, avg_rr=0)


def test_series_shorter_than_warmup_gives_zero_stats():
    series = build_series([100.0] * 25)
    assert TradeSimulator().simulate(series, [], always()) == StrategyStats.empty()


def test_rising_series_single_long_exits_at_target(rising_series):
    # Profit lock far away so only the target can close the trade
    sim = TradeSimulator(SimulationConfig(lock_factor=5.0))
    run = sim.run(rising_series, [], once(Direction.LONG))

    assert len(run.outcomes) == 1
    trade = run.outcomes[0]
    assert trade.exit_reason == ExitReason.TARGET
    assert trade.entry_index == 25
    # ATR is 1.5 on this series -> target 125 + 1.65, first close above is 127
    assert trade.exit_price == pytest.approx(127.0)
    assert trade.duration == 2

    stats = run.stats
    assert stats.trades == 1
    assert stats.wins == 1
    assert stats.losses == 0
    assert stats.win_rate == 100


def test_rising_series_default_config_locks_profit(rising_series):
    run = TradeSimulator().run(rising_series, [], once(Direction.LONG))

    assert len(run.outcomes) == 1
    assert run.outcomes[0].exit_reason == ExitReason.PROFIT_LOCK
    assert run.outcomes[0].duration == 1
    assert run.outcomes[0].is_winner


def test_entry_sizing_uses_balance_cap(rising_series):
    run = TradeSimulator().run(rising_series, [], once(Direction.LONG))
    # Risk budget 30 over a 1.05 stop allows ~28.6 units, balance pays for 100 / 125
    assert run.outcomes[0].size == pytest.approx(100.0 / 125.0)


def test_stop_exit_counts_as_loss():
    series = build_series([100.0] * 26 + [99.0 - i for i in range(20)])
    run = TradeSimulator().run(series, [], once(Direction.LONG))

    trade = run.outcomes[0]
    assert trade.exit_reason == ExitReason.STOP
    assert trade.exit_index == 26
    assert trade.profit_loss < 0
    assert trade.risk_pct == pytest.approx(0.01)
    assert trade.rr == pytest.approx(1.0)

    stats = run.stats
    assert stats.trades == 1
    assert stats.wins == 0
    assert stats.losses == 1
    assert stats.win_rate == 0


def test_short_stop_on_rally():
    series = build_series([100.0] * 26 + [101.0] * 10)
    run = TradeSimulator().run(series, [], once(Direction.SHORT))

    trade = run.outcomes[0]
    assert trade.direction == Direction.SHORT
    assert trade.exit_reason == ExitReason.STOP
    assert trade.profit_loss < 0


def test_horizon_exit_closes_at_last_scanned_bar(flat_series):
    sim = TradeSimulator()
    run = sim.run(flat_series, [], once(Direction.LONG))

    trade = run.outcomes[0]
    assert trade.exit_reason == ExitReason.HORIZON
    assert trade.duration == sim.config.max_holding_bars - 1
    assert trade.exit_index == 25 + sim.config.max_holding_bars - 1
    assert trade.profit_loss == 0
    assert trade.is_winner


def test_signal_on_last_bar_is_zero_duration_trade():
    series = build_series([100.0] * 30)

    def _last_bar(window):
        return Direction.LONG if window.index == 29 else None

    run = TradeSimulator().run(series, [], FunctionStrategy("last", _last_bar))
    assert len(run.outcomes) == 1
    assert run.outcomes[0].duration == 0
    assert run.outcomes[0].exit_reason == ExitReason.HORIZON


def test_cooldown_spaces_entries(rising_series):
    sim = TradeSimulator()
    run = sim.run(rising_series, [], always(Direction.LONG))

    entries = [t.entry_index for t in run.outcomes]
    assert entries == [25, 33, 41, 49, 57]
    assert all(b - a >= sim.config.cooldown for a, b in zip(entries, entries[1:]))


def test_at_most_one_open_position(rising_series):
    run = TradeSimulator(SimulationConfig(cooldown=0)).run(rising_series, [], always(Direction.LONG))

    assert len(run.outcomes) > 1
    for prev, nxt in zip(run.outcomes, run.outcomes[1:]):
        assert nxt.entry_index > prev.exit_index


def test_ruin_stops_new_entries():
    series = build_series([100.0] * 26 + [300.0] * 20)
    run = TradeSimulator().run(series, [], always(Direction.SHORT))

    assert run.ruined
    assert run.final_balance == 0
    assert len(run.outcomes) == 1
    assert run.stats.trades == 1


def test_without_ruin_the_same_strategy_keeps_trading():
    series = build_series([100.0] * 26 + [100.5] * 20)
    run = TradeSimulator().run(series, [], always(Direction.SHORT))
    assert not run.ruined
    assert len(run.outcomes) > 1


def test_strategy_receives_windows_and_bookkeeping():
    series = build_series([100.0 + i for i in range(40)])
    higher = build_series([50.0] * 5)
    seen = []

    def _record(window):
        seen.append(window)
        return None

    TradeSimulator().run(series, higher, FunctionStrategy("rec", _record))

    first = seen[0]
    assert first.index == 25
    assert len(first.candles) == 26
    assert first.prices[-1] == 125.0
    assert first.higher is higher
    assert first.cooldown == 8
    assert all(len(w.prices) <= 30 for w in seen)
    assert seen[-1].candles[-1].close == 139.0


def test_simulate_safely_degrades_errors_to_zero(rising_series, caplog):
    def _boom(window):
        raise RuntimeError("broken indicator")

    with caplog.at_level(logging.ERROR):
        stats = TradeSimulator().simulate_safely(rising_series, [], FunctionStrategy("boom", _boom), label="AAA 1day")

    assert stats == StrategyStats.empty()
    assert "broken indicator" in caplog.text


def test_simulation_is_deterministic():
    rng = np.random.RandomState(7)
    closes = 100 + np.cumsum(rng.normal(0, 1, 400))
    series = build_series(closes, spread=0.8)

    sim = TradeSimulator()
    for strategy in (SmaCrossover(use_trend_filter=False), RsiReversal(), BreakoutMomentum()):
        assert sim.simulate(series, [], strategy) == sim.simulate(series, [], strategy)


def test_win_loss_accounting_on_random_walk():
    rng = np.random.RandomState(11)
    closes = 50 + np.cumsum(rng.normal(0, 0.7, 600))
    series = build_series(np.maximum(closes, 1.0), spread=0.6)

    sim = TradeSimulator(SimulationConfig(cooldown=2))
    for strategy in (always(Direction.LONG), always(Direction.SHORT), SmaCrossover(use_trend_filter=False)):
        run = sim.run(series, [], strategy)
        stats = run.stats
        assert stats.wins + stats.losses == stats.trades
        if stats.trades:
            assert stats.win_rate == pytest.approx(stats.wins / stats.trades * 100, abs=0.005)
        else:
            assert stats.win_rate == 0


def test_never_signalling_strategy_has_no_trades(rising_series):
    assert TradeSimulator().simulate(rising_series, [], never()) == StrategyStats.empty()


class TestPositionSize:
    def test_risk_budget_over_stop_distance(self):
        size = position_size(1_000_000, entry_price=10, stop_distance=2, risk_fraction=0.1)
        assert size == pytest.approx(100_000 / 2)

    def test_minimum_risk_amount_floor(self):
        size = position_size(100_000, entry_price=10, stop_distance=1, risk_fraction=0.0001, min_risk_amount=30)
        assert size == pytest.approx(30)

    def test_capped_by_balance(self):
        assert position_size(100, entry_price=125, stop_distance=1.05) == pytest.approx(0.8)

    def test_stop_distance_floor(self):
        size = position_size(1e9, entry_price=1, stop_distance=0, risk_fraction=0.1, min_stop_distance=0.5)
        assert size == pytest.approx(1e8 / 0.5)

    def test_monotonic_in_risk_fraction(self):
        fractions = [0.01, 0.05, 0.1, 0.15, 0.3, 0.6, 1.0]
        sizes = [position_size(1_000_000, 20, 1.5, risk_fraction=f) for f in fractions]
        assert all(b >= a for a, b in zip(sizes, sizes[1:]))

    def test_zero_balance_gives_zero_size(self):
        assert position_size(0, entry_price=10, stop_distance=1) == 0

    def test_rejects_non_positive_entry(self):
        with pytest.raises(ValueError):
            position_size(100, entry_price=0, stop_distance=1)


class TestRiskLevels:
    def test_long(self):
        stop, target = risk_levels(100, Direction.LONG, atr=2.0, stop_factor=0.7, target_factor=1.1)
        assert stop == pytest.approx(98.6)
        assert target == pytest.approx(102.2)

    def test_short(self):
        stop, target = risk_levels(100, Direction.SHORT, atr=2.0, stop_factor=0.7, target_factor=1.1)
        assert stop == pytest.approx(101.4)
        assert target == pytest.approx(97.8)


def test_exit_metrics(rising_series):
    run = TradeSimulator().run(rising_series, [], always(Direction.LONG))
    assert exit_reason_counts(run.outcomes) == {"profit_lock": 5}
    assert total_profit_loss(run.outcomes) == pytest.approx(run.final_balance - 100.0)
    assert exit_reason_counts([]) == {}
