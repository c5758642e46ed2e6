from __future__ import annotations

from prospect_radar.core.metrics import (
    PopulationScalars,
    compute_composite_score,
    compute_derived_metrics,
    compute_nhle,
    compute_rank_score,
    compute_stats_score,
    population_scalars,
    round_fixed,
)
from prospect_radar.core.records import LeagueConfig, RawPlayerRecord

CONFIG = LeagueConfig(league_factors={"NCAA": 0.41, "OHL": 0.30}, season_length_nhl=82)


def _player(name: str, league: str, ppg: float, avg_rank: float) -> RawPlayerRecord:
    return RawPlayerRecord(name=name, league=league, ppg=ppg, avg_rank=avg_rank)


def test_two_player_population_matches_worked_example() -> None:
    p1 = _player("P1", "NCAA", 1.68, 1.0)
    p2 = _player("P2", "OHL", 1.45, 7.2)

    scalars = population_scalars([p1, p2], CONFIG)
    assert scalars == PopulationScalars(max_nhle=56.5, max_avg_rank=7.2)

    m1 = compute_derived_metrics(p1, CONFIG, scalars)
    m2 = compute_derived_metrics(p2, CONFIG, scalars)

    assert m1.nhle == 56.5
    assert m2.nhle == 35.7
    assert m1.stats_score == 100.0
    assert m2.stats_score == 63.2
    assert m1.rank_score == 87.4
    assert m2.rank_score == 9.1
    assert m1.composite_score == 93.7
    assert m2.composite_score == round_fixed(m2.stats_score * 0.5 + m2.rank_score * 0.5, 1)
    assert m2.composite_score == 36.2


def test_unknown_league_uses_default_factor() -> None:
    record = _player("Drifter", "Mars Junior League", 1.0, 3.0)
    assert compute_nhle(record, CONFIG) == 20.5


def test_season_length_scales_nhle() -> None:
    record = _player("Short Season", "NCAA", 1.0, 3.0)
    short = LeagueConfig(league_factors={"NCAA": 0.5}, season_length_nhl=40)
    assert compute_nhle(record, short) == 20.0


def test_composite_is_equal_weighted_blend() -> None:
    assert compute_composite_score(80.0, 60.0) == 70.0
    assert compute_composite_score(0.0, 0.0) == 0.0


def test_zero_population_maxima_give_zero_scores() -> None:
    assert compute_stats_score(12.3, 0.0) == 0.0
    assert compute_rank_score(4.0, 0.0) == 0.0

    record = _player("Solo", "NCAA", 0.0, 0.0)
    scalars = population_scalars([record], CONFIG)
    metrics = compute_derived_metrics(record, CONFIG, scalars)
    assert metrics.stats_score == 0.0
    assert metrics.rank_score == 0.0
    assert metrics.composite_score == 0.0


def test_scores_are_clamped_to_visible_scale() -> None:
    assert compute_stats_score(600.0, 500.0) == 100.0
    assert compute_stats_score(-3.0, 50.0) == 0.0
    assert compute_rank_score(-5.0, 10.0) == 100.0
    assert compute_rank_score(25.0, 10.0) == 0.0


def test_outlier_production_keeps_every_score_in_range() -> None:
    players = [_player(f"Regular {i}", "OHL", 2.0 + i * 0.05, float(i + 1)) for i in range(10)]
    players.append(_player("Outlier", "NCAA", 14.9, 40.0))
    scalars = population_scalars(players, CONFIG)
    assert scalars.max_nhle == compute_nhle(players[-1], CONFIG)

    for record in players:
        metrics = compute_derived_metrics(record, CONFIG, scalars)
        assert 0.0 <= metrics.stats_score <= 100.0
        assert 0.0 <= metrics.rank_score <= 100.0
        assert 0.0 <= metrics.composite_score <= 100.0


def test_unranked_sentinel_is_scored_by_formula() -> None:
    assert compute_rank_score(0.0, 12.0) == 100.0


def test_rank_headroom_keeps_best_player_below_perfect() -> None:
    players = [_player("Best", "OHL", 1.0, 1.0), _player("Worst", "OHL", 1.0, 30.0)]
    scalars = population_scalars(players, CONFIG)
    best = compute_derived_metrics(players[0], CONFIG, scalars)
    worst = compute_derived_metrics(players[1], CONFIG, scalars)
    assert best.rank_score < 100.0
    assert worst.rank_score > 0.0


def test_empty_population_scalars_are_zero() -> None:
    assert population_scalars([], CONFIG) == PopulationScalars(0.0, 0.0)


def test_round_fixed_rounds_half_up_on_decimal_value() -> None:
    assert round_fixed(36.15, 1) == 36.2
    assert round_fixed(0.125, 2) == 0.13
    assert round_fixed(63.18584070796461, 1) == 63.2
    assert round_fixed(-0.05, 1) == -0.1
