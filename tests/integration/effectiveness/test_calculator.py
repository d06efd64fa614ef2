"""Integration tests for the type effectiveness calculator."""

import pytest

from src.core.exceptions.base import InvalidArgumentError, ServiceErrorCode
from src.core.service.effectiveness.calculator import (
    attack_effectiveness,
    attack_multiplier,
    defense_effectiveness,
    defense_multiplier,
)
from src.core.service.effectiveness.types import ALL_TYPES, TypeMatrix, parse_percentage


@pytest.fixture
def matrix():
    """A small matrix; every other cell is neutral."""
    return TypeMatrix({
        ("Fire", "Nature"): 2.0,
        ("Fire", "Frost"): 1.5,
        ("Fire", "Water"): 0.5,
        ("Earth", "Nature"): 0.5,
        ("Earth", "Electric"): 2.0,
        ("Water", "Fire"): 2.0,
        ("Nature", "Fire"): 0.5,
        ("Electric", "Earth"): 0.5,
    })


class TestAttackEffectiveness:
    """Attack-side classification."""

    def test_single_type(self, matrix):
        result = attack_effectiveness(matrix, "Fire")

        assert result.first_type == "Fire"
        assert result.second_type is None
        assert result.strong_against == ["Frost", "Nature"]
        assert result.weak_against == ["Water"]

    def test_type_names_are_case_insensitive(self, matrix):
        assert attack_effectiveness(matrix, "Fire") == attack_effectiveness(matrix, "fire")
        assert attack_effectiveness(matrix, "FIRE", "earth") == attack_effectiveness(matrix, "Fire", "Earth")

    def test_dual_type_exactly_neutral_is_in_neither_set(self, matrix):
        # Fire x Earth against Nature: 2.0 * 0.5 == 1.0
        result = attack_effectiveness(matrix, "Fire", "Earth")

        assert "Nature" not in result.strong_against
        assert "Nature" not in result.weak_against
        assert result.strong_against == ["Frost", "Electric"]
        assert result.weak_against == ["Water"]

    def test_multiplicative_composition(self, matrix):
        for candidate in ALL_TYPES:
            combined = attack_multiplier(matrix, "Fire", "Earth", candidate)
            assert combined == matrix.multiplier("Fire", candidate) * matrix.multiplier("Earth", candidate)

    def test_neutral_matrix_classifies_nothing(self):
        result = attack_effectiveness(TypeMatrix(), "Spirit", "Wind")

        assert result.strong_against == []
        assert result.weak_against == []

    def test_empty_second_type_means_single_type(self, matrix):
        assert attack_effectiveness(matrix, "Fire", "") == attack_effectiveness(matrix, "Fire")

    def test_results_follow_catalog_order(self, matrix):
        result = attack_effectiveness(matrix, "Fire")
        assert result.strong_against == sorted(result.strong_against, key=ALL_TYPES.index)


class TestDefenseEffectiveness:
    """Defense-side classification."""

    def test_single_type(self, matrix):
        result = defense_effectiveness(matrix, "fire")

        assert result.first_type == "Fire"
        assert result.vulnerable_to == ["Water"]
        assert result.resistant_to == ["Nature"]

    def test_dual_type_exactly_neutral_is_in_neither_set(self):
        matrix = TypeMatrix({("Water", "Fire"): 2.0, ("Water", "Nature"): 0.5})

        result = defense_effectiveness(matrix, "Fire", "Nature")

        assert "Water" not in result.vulnerable_to
        assert "Water" not in result.resistant_to

    def test_multiplicative_composition(self, matrix):
        for candidate in ALL_TYPES:
            combined = defense_multiplier(matrix, "Earth", "Nature", candidate)
            assert combined == matrix.multiplier(candidate, "Earth") * matrix.multiplier(candidate, "Nature")


class TestTypeValidation:
    """Invalid type names."""

    @pytest.mark.parametrize("first_type", [None, "", "   "])
    def test_missing_first_type(self, matrix, first_type):
        with pytest.raises(InvalidArgumentError) as exc:
            attack_effectiveness(matrix, first_type)
        assert exc.value.code == ServiceErrorCode.INVALID_TYPE

    def test_unknown_first_type(self, matrix):
        with pytest.raises(InvalidArgumentError):
            defense_effectiveness(matrix, "Plasma")

    def test_unknown_second_type(self, matrix):
        with pytest.raises(InvalidArgumentError):
            attack_effectiveness(matrix, "Fire", "Plasma")


class TestTypeMatrix:
    """Matrix construction from catalog percentages."""

    @pytest.mark.parametrize("raw,expected", [
        ("150", 1.5),
        ("50%", 0.5),
        (" 100 ", 1.0),
        ("", None),
        (None, None),
        ("n/a", None),
    ])
    def test_parse_percentage(self, raw, expected):
        assert parse_percentage(raw) == expected

    def test_from_percentages_treats_bad_cells_as_neutral(self):
        matrix = TypeMatrix.from_percentages({
            "Fire": {"Nature": "200", "Water": "oops", "Frost": None},
            "Plasma": {"Fire": "300"},
        })

        assert matrix.multiplier("Fire", "Nature") == 2.0
        assert matrix.multiplier("Fire", "Water") == 1.0
        assert matrix.multiplier("Fire", "Frost") == 1.0
        assert len(matrix) == 1
