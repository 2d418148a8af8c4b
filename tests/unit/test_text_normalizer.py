# ============================================================================
# FILE: tests/unit/test_text_normalizer.py
# ============================================================================
"""
Unit tests for name and dosage normalization
"""

import pytest

from rx_matching.utils.text_normalizer import (
    fold_diacritics,
    normalize_key,
    keys_are_similar,
    normalize_dosage,
    dosages_match,
    name_similarity,
    main_active_ingredient,
)


def test_fold_diacritics():
    assert fold_diacritics("Kháng sinh") == "Khang sinh"
    assert fold_diacritics("Đường uống") == "Duong uong"
    assert fold_diacritics("") == ""


@pytest.mark.parametrize("dosage", ["2500mg+500mg", "2500mg/500mg", "2500mg 500mg", "2500 mg / 500 mg"])
def test_dosage_separators_do_not_matter(dosage):
    assert normalize_dosage(dosage) == "2500mg500mg"


def test_dosage_keeps_decimal_point():
    assert normalize_dosage("2.5mg") == "2.5mg"
    assert normalize_dosage("2,5 mg") == "2.5mg"
    assert normalize_dosage("2.5mg") != normalize_dosage("25mg")


def test_dosages_match_requires_both_sides():
    assert dosages_match("500mg", "500 mg")
    assert not dosages_match("500mg", None)
    assert not dosages_match(None, None)
    # Textual comparison, no unit conversion
    assert not dosages_match("1000mg", "1g")


def test_normalize_key_letters_only():
    key = normalize_key("Paracetamol 500mg")
    assert key == "paracetamolmg"
    assert key == normalize_key("Paracetamol_500mg")
    assert key.isalpha()
    assert normalize_key("Thuốc Đau-đầu 5") == "thuocdaudau"
    assert normalize_key(None) == ""


def test_keys_are_similar_trailing_letters_dropped():
    assert keys_are_similar("amoxicilin", "amoxicilin")
    assert keys_are_similar("amoxicilin", "amoxicili")
    assert keys_are_similar("paracetamol", "paracetam")
    assert not keys_are_similar("paracetamol", "paraceta")


def test_keys_are_similar_aligned_positions():
    # One substituted letter out of nine
    assert keys_are_similar("ibuprofen", "ibuprofan")
    assert not keys_are_similar("ibuprofen", "omeprazol")


def test_keys_are_similar_leading_letters_dropped_is_not_similar():
    # Leading drops are handled by the matcher's suffix rule
    assert not keys_are_similar("amoxicilin", "oxicilin")
    assert not keys_are_similar("", "abc")


def test_keys_are_similar_short_fragments():
    # Two-letter OCR fragments never stand in for a longer name
    assert not keys_are_similar("de", "dexa")
    assert not keys_are_similar("ab", "abc")
    assert keys_are_similar("de", "de")
    assert keys_are_similar("dex", "dexa")


def test_name_similarity():
    assert name_similarity("paracetamol", "paracetamol") == 1.0
    assert name_similarity("", "") == 1.0
    assert name_similarity("ibuprofenmax", "ibuprofen") == pytest.approx(0.75)
    assert name_similarity("paracetamol", "xyz") < 0.4


def test_main_active_ingredient():
    assert main_active_ingredient("Amoxicillin, Acid clavulanic") == "amoxicillin"
    assert main_active_ingredient("Amoxicilin; Acid clavulanic") == "amoxicilin"
    assert main_active_ingredient("Fe") is None
    assert main_active_ingredient(None) is None
