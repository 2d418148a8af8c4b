# ============================================================================
# FILE: tests/unit/test_line_reconstructor.py
# ============================================================================
"""
Unit tests for OCR line reconstruction
"""

from rx_matching.processors.prescription.line_reconstructor import LineReconstructor


def _texts(entries):
    return [entry.original_text for entry in entries]


def test_numbered_entries():
    """Two numbered lines give exactly two entries"""
    entries = LineReconstructor().reconstruct("1. Paracetamol 500mg\n2. Oresol\n")
    assert _texts(entries) == ["Paracetamol 500mg", "Oresol"]
    assert [e.line_index for e in entries] == [0, 1]


def test_empty_input():
    reconstructor = LineReconstructor()
    assert reconstructor.reconstruct("") == []
    assert reconstructor.reconstruct(None) == []
    assert reconstructor.reconstruct("   \n  \n") == []


def test_unparsable_text_yields_no_entries():
    assert LineReconstructor().reconstruct("12345\n!!!") == []


def test_full_prescription(sample_prescription_text):
    """Header, broken dosage line, usage lines and doctor footer"""
    entries = LineReconstructor().reconstruct(sample_prescription_text)

    assert _texts(entries) == [
        "Augmentin 875mg+125mg",
        "Paracetamol 500mg SL: 20 viên",
        "Oresol",
    ]
    # Index of the first source line of each entry
    assert [e.line_index for e in entries] == [4, 7, 9]


def test_ocr_letter_fix_applied():
    entries = LineReconstructor().reconstruct("1. oxicilin 500mg")
    assert _texts(entries) == ["Amoxicilin 500mg"]


def test_custom_fix_table():
    entries = LineReconstructor(ocr_fixes={}).reconstruct("1. oxicilin 500mg")
    assert _texts(entries) == ["oxicilin 500mg"]


def test_inline_ordinals_are_split():
    entries = LineReconstructor().reconstruct("1. Paracetamol 500mg 2. Oresol")
    assert _texts(entries) == ["Paracetamol 500mg", "Oresol"]


def test_inline_count_before_usage_is_not_split():
    """A usage instruction after "uống 2." stays with its entry"""
    entries = LineReconstructor().reconstruct("1. Paracetamol 500mg ngày uống 2. Sáng 1 viên\n2. Oresol")
    assert _texts(entries) == ["Paracetamol 500mg ngày uống 2. Sáng 1 viên", "Oresol"]
    assert [e.line_index for e in entries] == [0, 1]


def test_lowercase_continuation_merged():
    entries = LineReconstructor().reconstruct("1. Vitamin C\nsủi 1000mg\n2. Oresol")
    assert _texts(entries) == ["Vitamin C sủi 1000mg", "Oresol"]


def test_trailing_plus_continuation_merged():
    entries = LineReconstructor().reconstruct("1. Paracetamol 500mg +\nCafein 65mg")
    assert _texts(entries) == ["Paracetamol 500mg + Cafein 65mg"]


def test_open_parenthesis_continuation_merged():
    entries = LineReconstructor().reconstruct("1. Paracetamol (Hapacol\nViên sủi) 500mg")
    assert _texts(entries) == ["Paracetamol (Hapacol Viên sủi) 500mg"]


def test_usage_lines_do_not_end_section():
    text = (
        "1. Paracetamol 500mg\n"
        "Uống sau khi ăn\n"
        "2. Oresol\n"
        "Lời dặn: uống nhiều nước\n"
        "3. Vitamin C 500mg\n"
    )
    entries = LineReconstructor().reconstruct(text)
    assert _texts(entries) == ["Paracetamol 500mg", "Oresol"]


def test_unnumbered_entries_and_metadata_filter():
    text = "Chẩn đoán: viêm họng\nAmoxicilin 500mg\nOresol"
    entries = LineReconstructor().reconstruct(text)
    assert _texts(entries) == ["Amoxicilin 500mg", "Oresol"]
    assert [e.line_index for e in entries] == [1, 2]


def test_unnumbered_drug_with_own_dosage_starts_new_entry():
    entries = LineReconstructor().reconstruct("Paracetamol 500mg\nIbuprofen 400mg")
    assert _texts(entries) == ["Paracetamol 500mg", "Ibuprofen 400mg"]


def test_header_with_first_entry_on_same_line():
    entries = LineReconstructor().reconstruct("Thuốc điều trị: Paracetamol 500mg\n2. Oresol")
    assert _texts(entries) == ["Paracetamol 500mg", "Oresol"]


def test_reconstruct_is_deterministic(sample_prescription_text):
    reconstructor = LineReconstructor()
    assert reconstructor.reconstruct(sample_prescription_text) == reconstructor.reconstruct(sample_prescription_text)
