"""Unit tests for rank ordering used by minimum-rank rules."""

import pytest

from mlm_system.config.ranks import Rank, RANK_LEVELS, rankLevel, isRankBelow


class TestRankOrdering:

    def test_every_rank_has_a_level(self):
        assert set(RANK_LEVELS) == set(Rank)
        assert sorted(RANK_LEVELS.values()) == list(range(1, len(Rank) + 1))

    @pytest.mark.parametrize("stored", [None, "", "legend"])
    def test_unknown_rank_counts_as_starter(self, stored):
        assert rankLevel(stored) == RANK_LEVELS[Rank.STARTER]

    def test_stored_value_is_case_insensitive(self):
        assert rankLevel("Gold") == RANK_LEVELS[Rank.GOLD]

    @pytest.mark.parametrize("rank,minimum,below", [
        ("starter", "silver", True),
        ("silver", "silver", False),
        ("diamond", "bronze", False),
        (None, "bronze", True),
        ("starter", None, False),
    ])
    def test_is_rank_below(self, rank, minimum, below):
        assert isRankBelow(rank, minimum) is below
