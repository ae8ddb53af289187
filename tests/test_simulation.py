"""Tests for the Monte Carlo simulators."""

import random

import pytest

from deckodds import (
    ChainCard,
    LAND_COST,
    Settings,
    build_chain_library,
    free_spell_probability,
    simulate_chained_trigger,
    simulate_cost_reveal,
    simulate_permanent_streak,
    simulate_reveal_until,
    simulate_type_diversity,
)

# =============================================================================
# Reveal until stop
# =============================================================================


class TestRevealUntil:
    def test_first_card_stops_at_hypergeometric_rate(self, rng):
        cards = [True] * 10 + [False] * 30
        result = simulate_reveal_until(cards, lambda card, _: card, 50000, rng)

        assert result.distribution[0] == pytest.approx(10 / 40, abs=0.01)
        # Misses before the first hit: (N - K) / (K + 1)
        assert result.expected == pytest.approx(30 / 11, abs=0.06)

    def test_distribution_sums_to_one(self, rng):
        cards = [True] * 5 + [False] * 15
        result = simulate_reveal_until(cards, lambda card, _: card, 2000, rng)

        assert len(result.distribution) == 21
        assert sum(result.distribution) == pytest.approx(1.0)

    def test_nothing_stops(self, rng):
        result = simulate_reveal_until([False] * 12, lambda card, _: card, 500, rng)
        assert result.expected == 12
        assert result.distribution[12] == 1.0

    def test_stop_on_position(self, rng):
        result = simulate_reveal_until(
            list(range(30)), lambda _, pos: pos == 4, 100, rng
        )
        assert result.expected == 4

    def test_same_seed_same_result(self):
        cards = [True] * 10 + [False] * 50
        first = simulate_reveal_until(
            cards, lambda card, _: card, 1000, random.Random(3)
        )
        second = simulate_reveal_until(
            cards, lambda card, _: card, 1000, random.Random(3)
        )
        assert first == second

    def test_empty_library(self, rng):
        result = simulate_reveal_until([], lambda card, _: card, 100, rng)
        assert result.expected == 0.0
        assert result.iterations == 0

    def test_iterations_must_be_positive(self, rng):
        with pytest.raises(ValueError, match="iterations"):
            simulate_reveal_until([True], lambda card, _: card, 0, rng)


class TestPermanentStreak:
    def test_all_permanents(self, rng):
        result = simulate_permanent_streak(60, 0, 200, rng)
        assert result["expected_permanents"] == 60
        assert result["percent_of_deck"] == pytest.approx(100.0)
        assert result["probability_none"] == 0.0

    def test_no_permanents(self, rng):
        result = simulate_permanent_streak(60, 60, 200, rng)
        assert result["expected_permanents"] == 0
        assert result["probability_none"] == 1.0

    def test_probability_none_matches_density(self, rng):
        result = simulate_permanent_streak(100, 20, 30000, rng)
        assert result["probability_none"] == pytest.approx(0.2, abs=0.01)
        assert result["expected_permanents"] == pytest.approx(80 / 21, abs=0.1)

    def test_out_of_range(self, rng):
        with pytest.raises(ValueError):
            simulate_permanent_streak(60, 61, 100, rng)


# =============================================================================
# Fixed-size reveals
# =============================================================================


class TestTypeDiversity:
    def test_dual_typed_cards_count_twice(self, rng):
        result = simulate_type_diversity(
            {("artifact", "creature"): 60}, reveal=1, iterations=500, rng=rng
        )
        assert result.expected_types == 2.0
        assert result.distribution == [0.0, 0.0, 1.0]

    def test_every_type_seen(self, rng):
        type_counts = {
            ("creature",): 15,
            ("instant",): 15,
            ("sorcery",): 15,
            ("land",): 15,
        }
        result = simulate_type_diversity(type_counts, reveal=60, iterations=50, rng=rng)

        assert result.expected == 4.0
        assert result.probability_at_threshold == 1.0
        # One of the four is cast instead of going to hand
        assert result.expected_cards_to_hand == 3.0

    def test_untyped_filler(self, rng):
        result = simulate_type_diversity(
            {("creature",): 10}, reveal=5, deck_size=60, iterations=5000, rng=rng
        )
        assert 0.0 < result.expected < 1.0
        assert sum(result.distribution) == pytest.approx(1.0)

    def test_nothing_revealed(self, rng):
        result = simulate_type_diversity({("creature",): 10}, reveal=0, rng=rng)
        assert result.expected == 0.0
        assert result.distribution == [1.0, 0.0]


class TestCostReveal:
    def test_everything_hits(self, rng):
        result = simulate_cost_reveal({2: 10}, x=10, iterations=100, rng=rng)
        assert result.expected == 10

    def test_costs_above_x_miss(self, rng):
        result = simulate_cost_reveal({5: 10}, x=3, iterations=100, rng=rng)
        assert result.expected == 0
        assert result.distribution[0] == 1.0

    def test_mean_hits_match_density(self, rng):
        result = simulate_cost_reveal(
            {1: 20}, x=10, deck_size=40, iterations=20000, rng=rng
        )
        assert result.expected == pytest.approx(5.0, abs=0.1)
        assert result.probability_at_least(0) == pytest.approx(1.0)

    def test_zero_x(self, rng):
        result = simulate_cost_reveal({1: 20}, x=0, deck_size=40, rng=rng)
        assert result.expected == 0.0
        assert result.iterations == 0


class TestFreeSpellProbability:
    def test_cheaper_spells_are_free(self):
        result = free_spell_probability(60, {1: 10, 2: 10, 5: 10}, cast_cost=3)

        assert result["prob_free_spell"] == pytest.approx(20 / 60)
        assert result["prob_whiff"] == pytest.approx(40 / 60)
        assert result["expected_cost"] == pytest.approx(1.5)
        assert result["cost_distribution"][5] == pytest.approx(10 / 60)

    def test_zero_cost_trigger(self):
        result = free_spell_probability(60, {1: 10}, cast_cost=0)
        assert result["prob_free_spell"] == 0.0
        assert result["cost_distribution"] == {}

    def test_counts_exceed_deck(self):
        with pytest.raises(ValueError):
            free_spell_probability(10, {1: 11}, cast_cost=3)


# =============================================================================
# Chained triggers
# =============================================================================


class TestBuildChainLibrary:
    def test_adds_lands_and_excludes_one_copy(self):
        vortex = ChainCard(6, trigger_eligible=True, name="Vortex")
        bear = ChainCard(2, name="Bear")

        cards = build_chain_library([vortex, vortex, bear], lands=3, exclude=vortex)

        assert len(cards) == 5
        assert cards.count(vortex) == 1
        assert sum(1 for c in cards if c.cost == LAND_COST) == 3

    def test_nothing_excluded(self):
        bear = ChainCard(2)
        assert build_chain_library([bear, bear]) == [bear, bear]


class TestChainedTrigger:
    def test_no_eligible_cards(self, rng):
        cards = [ChainCard(5)] * 20 + build_chain_library([], lands=10)
        result = simulate_chained_trigger(cards, 3, iterations=200, rng=rng)

        assert result.mean_cast_count == 0.0
        assert result.chain_rate == 0.0
        assert result.mean_spell_cost == 0.0
        assert result.eligible_pool == []
        # Every card is exiled when nothing can be cast
        assert result.mean_cards_exiled == 30

    def test_zero_cost_triggers_stop_at_depth_cap(self, rng):
        cards = [ChainCard(0, trigger_eligible=True)] * 30
        result = simulate_chained_trigger(
            cards, 0, max_depth=10, iterations=50, rng=rng
        )

        assert result.mean_cast_count == 11
        assert result.chain_rate == 1.0
        assert result.mean_cost == 0.0

    def test_zero_depth_never_chains(self, rng):
        cards = [ChainCard(0, trigger_eligible=True)] * 30
        result = simulate_chained_trigger(cards, 0, max_depth=0, iterations=50, rng=rng)

        assert result.mean_cast_count == 1
        assert result.chain_rate == 0.0

    def test_single_castable_card(self, rng):
        cards = build_chain_library([ChainCard(2)], lands=9)
        result = simulate_chained_trigger(cards, 4, iterations=2000, rng=rng)

        assert result.mean_cast_count == 1
        assert result.mean_cost == 2
        assert result.mean_spell_cost == 2
        # Uniform position among ten cards
        assert result.mean_cards_exiled == pytest.approx(5.5, abs=0.3)

    def test_chain_uses_cast_cost_as_next_threshold(self, rng):
        # Only the 2-drop chains, and from it only the 1-drop is castable
        cards = [
            ChainCard(2, trigger_eligible=True),
            ChainCard(4),
            ChainCard(1),
        ]
        result = simulate_chained_trigger(cards, 5, iterations=3000, rng=rng)

        assert result.mean_cast_count == pytest.approx(4 / 3, abs=0.05)
        assert result.chain_rate == pytest.approx(1 / 3, abs=0.05)
        assert result.to_dict()["castable_cards"] == 3
        assert result.to_dict()["trigger_eligible_in_range"] == 1

    def test_seeded_runs_repeat(self):
        cards = build_chain_library(
            [ChainCard(c, trigger_eligible=c % 2 == 0) for c in range(7)] * 4, lands=30
        )
        first = simulate_chained_trigger(
            cards, 5, iterations=500, rng=random.Random(1)
        )
        second = simulate_chained_trigger(
            cards, 5, iterations=500, rng=random.Random(1)
        )
        assert first.to_dict() == second.to_dict()

    def test_negative_depth(self, rng):
        with pytest.raises(ValueError, match="max_depth"):
            simulate_chained_trigger([ChainCard(1)], 1, max_depth=-1, rng=rng)


# =============================================================================
# Settings-driven defaults
# =============================================================================


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Environment for DECKODDS_* tunables, isolated from any .env file."""
    for name in (
        "DECKODDS_REVEAL_ITERATIONS",
        "DECKODDS_STREAK_ITERATIONS",
        "DECKODDS_CHAIN_ITERATIONS",
        "DECKODDS_CHAIN_MAX_DEPTH",
        "DECKODDS_SEED",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestSettingsDefaults:
    def test_depth_cap_from_environment(self, env):
        env.setenv("DECKODDS_CHAIN_MAX_DEPTH", "0")
        cards = [ChainCard(0, trigger_eligible=True)] * 30

        result = simulate_chained_trigger(cards, 0, iterations=10)

        assert result.mean_cast_count == 1
        assert result.chain_rate == 0.0

    def test_iterations_from_environment(self, env):
        env.setenv("DECKODDS_REVEAL_ITERATIONS", "37")
        env.setenv("DECKODDS_STREAK_ITERATIONS", "41")
        env.setenv("DECKODDS_CHAIN_ITERATIONS", "43")

        reveal = simulate_reveal_until([True, False], lambda card, _: card)
        cost = simulate_cost_reveal({1: 5}, x=3, deck_size=10)
        chain = simulate_chained_trigger([ChainCard(1)] * 5, 2)

        assert reveal.iterations == 37
        assert cost.iterations == 37
        assert chain.iterations == 43
        assert simulate_permanent_streak(60, 60)["probability_none"] == 1.0

    def test_seed_from_environment_repeats(self, env):
        env.setenv("DECKODDS_SEED", "11")
        cards = [True] * 10 + [False] * 50

        first = simulate_reveal_until(cards, lambda card, _: card, 500)
        second = simulate_reveal_until(cards, lambda card, _: card, 500)

        assert first == second

    def test_explicit_settings_win_over_environment(self, env):
        env.setenv("DECKODDS_CHAIN_MAX_DEPTH", "0")
        cards = [ChainCard(0, trigger_eligible=True)] * 30
        settings = Settings(chain_iterations=25, chain_max_depth=3, seed=2)

        result = simulate_chained_trigger(cards, 0, settings=settings)

        assert result.iterations == 25
        assert result.mean_cast_count == 4

    def test_explicit_arguments_win_over_settings(self, rng):
        settings = Settings(reveal_iterations=9)
        result = simulate_type_diversity(
            {("creature",): 10}, reveal=3, iterations=20, rng=rng, settings=settings
        )
        assert result.iterations == 20
