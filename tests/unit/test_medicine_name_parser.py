# ============================================================================
# FILE: tests/unit/test_medicine_name_parser.py
# ============================================================================
"""
Unit tests for medicine name / dosage parsing and candidate preparation
"""

from rx_matching.utils.medicine_name_parser import (
    parse_medicine_name,
    contains_dosage,
    strip_usage_instructions,
    extract_quantity,
    split_brand_name,
    prepare_candidate,
    PreparedCandidate,
)


def test_parse_combination_dosage():
    parsed = parse_medicine_name("Augmentin 875mg+125mg")
    assert parsed.base_name == "Augmentin"
    assert parsed.dosage == "875mg/125mg"
    assert parsed.has_dosage


def test_parse_underscore_separated():
    parsed = parse_medicine_name("Paracetamol_500mg")
    assert parsed.base_name == "Paracetamol"
    assert parsed.dosage == "500mg"


def test_parse_without_dosage():
    parsed = parse_medicine_name("Oresol")
    assert parsed.base_name == "Oresol"
    assert parsed.dosage is None
    assert not parsed.has_dosage


def test_parse_multiword_and_decimal():
    assert parse_medicine_name("Vitamin C 500mg").base_name == "Vitamin C"
    assert parse_medicine_name("Meloxicam 7.5mg").dosage == "7.5mg"
    assert parse_medicine_name("Siro ho 250mg/5ml").dosage == "250mg/5ml"


def test_parse_empty():
    parsed = parse_medicine_name("  ")
    assert parsed.base_name == ""
    assert parsed.dosage is None


def test_unit_must_not_run_into_word():
    # "2 lần" (twice) and "2 gói" (two sachets) are not dosages
    assert parse_medicine_name("Ngày 2 lần").dosage is None
    assert not contains_dosage("Ngày uống 2 gói")
    assert contains_dosage("Paracetamol 500mg")
    assert not contains_dosage("Oresol")


def test_strip_usage_instructions():
    assert strip_usage_instructions("Paracetamol 500mg - Sáng 1 viên, tối 1 viên") == "Paracetamol 500mg"
    assert strip_usage_instructions("Oresol Uống: pha 1 gói") == "Oresol"
    assert strip_usage_instructions("Vitamin C 500mg") == "Vitamin C 500mg"


def test_extract_quantity():
    assert extract_quantity("Paracetamol 500mg 20 viên") == ("Paracetamol 500mg", 20)
    assert extract_quantity("Amoxicilin 500mg x 14") == ("Amoxicilin 500mg", 14)
    assert extract_quantity("Oresol") == ("Oresol", None)


def test_split_brand_name():
    assert split_brand_name("Paracetamol (Hapacol) 500mg") == ("Paracetamol 500mg", "Hapacol")
    assert split_brand_name("Oresol") == ("Oresol", None)


def test_prepare_candidate_with_quantity_and_brand():
    prepared = prepare_candidate("Paracetamol (Hapacol) 500mg SL: 20 viên")
    assert prepared.name == "Paracetamol 500mg"
    assert prepared.quantity == 20
    assert prepared.alternatives == ["Hapacol"]


def test_prepare_candidate_usage_dose_is_not_quantity():
    prepared = prepare_candidate("Amoxicilin 500mg - Sáng 1 viên, tối 1 viên")
    assert prepared.name == "Amoxicilin 500mg"
    assert prepared.quantity == 1
    assert prepared.alternatives == []


def test_candidate_parsable():
    assert PreparedCandidate(name="Oresol").is_parsable
    assert not PreparedCandidate(name="1").is_parsable
