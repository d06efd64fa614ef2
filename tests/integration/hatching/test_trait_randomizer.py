"""Integration tests for the trait randomizer."""

import random
from collections import Counter

import pytest
from unittest.mock import MagicMock

from src.core.exceptions.base import InvalidArgumentError, NotFoundError, ServiceErrorCode
from src.core.service.hatching.models import Gender, Rarity
from src.core.service.hatching.randomizer import (
    GENESIS_GENERA,
    MUTATION_UNSPECIFIED,
    PASSIVE_UNAVAILABLE,
    POTENTIAL_RANGES,
    TraitRandomizer,
    genesis_fertility_deduction,
    parse_rarity,
)


def stub_rng(**returns):
    """An rng whose draws return fixed values."""
    rng = MagicMock(spec=random.Random)
    for name, value in returns.items():
        getattr(rng, name).return_value = value
    return rng


class TestRarity:
    """Rarity draws and parsing."""

    def test_distribution_over_100k_draws(self):
        randomizer = TraitRandomizer(random.Random(1234))
        draws = 100000

        counts = Counter(randomizer.randomize_rarity() for _ in range(draws))

        expected = {
            Rarity.COMMON: 0.5,
            Rarity.UNCOMMON: 0.25,
            Rarity.RARE: 0.125,
            Rarity.EPIC: 0.07,
            Rarity.LEGENDARY: 0.04,
            Rarity.MYTHICAL: 0.015,
        }
        for rarity, share in expected.items():
            assert abs(counts[rarity] / draws - share) < 0.01, rarity

    @pytest.mark.parametrize("roll,rarity", [
        (1, Rarity.COMMON),
        (500, Rarity.COMMON),
        (501, Rarity.UNCOMMON),
        (750, Rarity.UNCOMMON),
        (751, Rarity.RARE),
        (875, Rarity.RARE),
        (876, Rarity.EPIC),
        (945, Rarity.EPIC),
        (946, Rarity.LEGENDARY),
        (985, Rarity.LEGENDARY),
        (986, Rarity.MYTHICAL),
        (1000, Rarity.MYTHICAL),
    ])
    def test_breakpoints(self, roll, rarity):
        randomizer = TraitRandomizer(stub_rng(randint=roll))
        assert randomizer.randomize_rarity() is rarity

    def test_parse_rarity_is_case_insensitive(self):
        assert parse_rarity("mythical") is Rarity.MYTHICAL
        assert parse_rarity(" Legendary ") is Rarity.LEGENDARY

    def test_parse_rarity_rejects_unknown(self):
        with pytest.raises(InvalidArgumentError) as exc:
            parse_rarity("Shiny")
        assert exc.value.code == ServiceErrorCode.INVALID_RARITY

    def test_fertility_deduction(self):
        assert genesis_fertility_deduction("Common") == 1000
        assert genesis_fertility_deduction(Rarity.MYTHICAL) == 300


class TestPotentials:
    """Potential stat draws per rarity band."""

    @pytest.mark.parametrize("rarity", list(Rarity))
    def test_values_within_band(self, rarity):
        randomizer = TraitRandomizer(random.Random(7))
        low, high = POTENTIAL_RANGES[rarity]

        for _ in range(500):
            potentials = randomizer.randomize_potentials(rarity)
            assert len(potentials) == 7
            assert all(low <= value <= high for value in potentials)

    def test_mythical_always_has_a_maximum_stat(self):
        for seed in range(200):
            potentials = TraitRandomizer(random.Random(seed)).randomize_potentials("Mythical")
            assert 65 in potentials
            assert all(50 <= value <= 65 for value in potentials)

    def test_mythical_overwrites_one_stat_when_maximum_missing(self):
        rng = stub_rng(randint=50, randrange=3)
        potentials = TraitRandomizer(rng).randomize_potentials(Rarity.MYTHICAL)

        assert potentials == [50, 50, 50, 65, 50, 50, 50]

    def test_unknown_rarity(self):
        with pytest.raises(InvalidArgumentError):
            TraitRandomizer().randomize_potentials("Ultra")


class TestMutationAndPassives:
    """Lenient paths: missing catalog metadata becomes a sentinel."""

    def test_mutation_roll_threshold(self):
        assert TraitRandomizer(stub_rng(randint=996)).roll_mutation() is True
        assert TraitRandomizer(stub_rng(randint=995)).roll_mutation() is False

    def test_pick_mutation_without_options(self):
        assert TraitRandomizer().pick_mutation([]) == MUTATION_UNSPECIFIED

    def test_pick_mutation_without_name(self):
        assert TraitRandomizer().pick_mutation([None]) == MUTATION_UNSPECIFIED

    def test_pick_mutation(self):
        assert TraitRandomizer().pick_mutation(["Frostbitten"]) == "Frostbitten"

    def test_passives_are_distinct_positions(self):
        randomizer = TraitRandomizer(random.Random(3))

        for _ in range(200):
            passives = randomizer.pick_passives(["Ambush", "Thick Skin"])
            assert {passives.first, passives.second} == {"Ambush", "Thick Skin"}

    def test_passive_without_name_becomes_sentinel(self):
        passives = TraitRandomizer(random.Random(5)).pick_passives([None, None])

        assert passives.first == PASSIVE_UNAVAILABLE
        assert passives.second == PASSIVE_UNAVAILABLE

    def test_fewer_than_two_passives(self):
        with pytest.raises(NotFoundError):
            TraitRandomizer().pick_passives(["Ambush"])


class TestGenusAndGender:
    def test_genus_from_genesis_list(self):
        randomizer = TraitRandomizer(random.Random(11))
        genera = {randomizer.randomize_genus() for _ in range(1000)}

        assert genera == set(GENESIS_GENERA)
        assert len(GENESIS_GENERA) == 12

    def test_gender(self):
        randomizer = TraitRandomizer(random.Random(11))
        assert {randomizer.randomize_gender() for _ in range(100)} == {Gender.MALE, Gender.FEMALE}
