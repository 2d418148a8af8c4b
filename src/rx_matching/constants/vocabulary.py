# ============================================================================
# src/rx_matching/constants/vocabulary.py
# ============================================================================
"""
Prescription Vocabulary
- Medicine section headers and stop markers
- Usage-instruction shapes
- Pharmaceutical vocabulary and non-medicine keywords
- Quantity units
- Match reason explanations

Line-level patterns are written against diacritic-folded, lowercased
text (see utils.text_normalizer.fold_diacritics) so OCR output with
and without Vietnamese diacritics is handled by one pattern set.
Patterns applied to raw entry text use IGNORECASE and list both
spellings.
"""

import re
from types import MappingProxyType

VOCABULARY_VERSION = "2024.2"

# Header phrases that open the medicine section (folded text)
SECTION_HEADER_PATTERN = re.compile(
    r'^(?:thuoc dieu tri|chi dinh dung thuoc|chi dinh thuoc|ten thuoc'
    r'|danh sach thuoc|thuoc ke don|medications?|prescribed medicines|rx)\b\s*[:.]?\s*'
)

# Entry numbering: "1.", "2)", "3/", "4 -"
ORDINAL_PATTERN = re.compile(r'^\s*(\d{1,2})\s*[.)/:-](?!\d)\s*')

# Several numbered entries OCR'd onto one line: split before " 2. Name"
INLINE_ORDINAL_SPLIT = re.compile(r'(?<=\S)\s+(?=\d{1,2}[.)]\s+[^\W\d_])')

# Markers that close the medicine section (folded text)
STOP_MARKER_PATTERNS = [
    re.compile(r'^loi (?:dan|khuyen)'),
    re.compile(r'\bbac s[iy]\b'),
    re.compile(r'^bs\b'),
    re.compile(r'^(?:duoc si|nguoi ke don|y si)\b'),
    re.compile(r'\bky(?:,)? (?:ten|ghi ro)\b'),
    re.compile(r'\bghi ro ho(?: va)? ten\b'),
    re.compile(r'^(?:hen )?tai kham\b'),
    re.compile(r'^(?:cong khoan|tong so|tong cong)\b'),
    re.compile(r'^(?:doctor|physician|signature|signed)\b'),
]

# Date footer: "Ngày 12 tháng 3 năm 2024"
DATE_FOOTER_PATTERN = re.compile(r'ngay\s*\d{1,2}\s*thang\s*\d{1,2}\s*nam\s*\d{2,4}')

# Usage-instruction line shapes (folded text). A line matching any of these
# is never treated as a stop marker.
USAGE_LINE_PATTERNS = [
    re.compile(r'^[-*•+]?\s*(?:sang|trua|chieu|toi)\b'),
    re.compile(r'^[-*•+]?\s*(?:ngay|moi ngay|moi lan)\s+(?:uong|dung|ngam|boi|nho|xit|\d+\s*lan)'),
    re.compile(r'\b(?:uong|ngam|boi|nho|xit|tiem)\b.*\d'),
    re.compile(r'\d+\s*(?:lan|vien|goi|ong|giot|nang|mieng)\b'),
    re.compile(r'^(?:cach dung|lieu dung|huong dan|ghi chu|sl)\s*:'),
    re.compile(r'\b(?:truoc|sau|trong) (?:khi )?(?:an|bua an)\b'),
    re.compile(r'\b(?:take|times? (?:a|per) day|daily|twice|once|at bedtime)\b'),
]

# Continuation symbols that glue a line to the previous entry
CONTINUATION_PREFIXES = ('+', '&', '/', '(', ',', ')')

# Trailing symbols that announce a continuation on the next line
TRAILING_CONTINUATION = ('+', '-')

# Dosage forms and drug-name morphology (folded text)
PHARMACEUTICAL_VOCABULARY_PATTERN = re.compile(
    r'\b(?:vien(?: nen| nang| sui| bao phim)?|nang|siro|goi|ong|tuyp|kem|thuoc mo|thuoc nho'
    r'|dung dich|hon dich|hon hop|tablets?|capsules?|syrup|cream|ointment|injection'
    r'|drops|suspension|sachet)\b'
    r'|\b[a-z]*(?:cill?in|m[iy]cin|floxacin|azole?|olol|pril|sartan|statin|profen|fenac'
    r'|oxicam|solon|sone|tidine|amol|formin|dipin)\b'
    r'|\b(?:cef|vitamin|vit\b|calci|magnesi|kali|oresol)[a-z]*'
)

# Patient / doctor / document metadata keywords (folded text)
NON_MEDICINE_KEYWORDS = (
    "don thuoc", "ho ten", "ho va ten", "tuoi", "chan doan", "bac si", "benh vien",
    "phong kham", "so dien thoai", "dien thoai", "dia chi", "cach dung", "loi dan",
    "ma so", "gioi tinh", "can nang", "kham benh", "ky ten", "ghi ro", "nguoi dua",
    "ma benh nhan", "so the", "bhyt", "khoa", "patient", "diagnosis", "address",
)

# Usage tails cut from an entry before matching (raw text)
USAGE_TAIL_PATTERNS = [
    re.compile(
        r'\s+(?:sáng|trưa|chiều|tối|sang|trua|chieu|toi)\s*:?\s*\d.*$',
        re.IGNORECASE,
    ),
    re.compile(
        r'\s+(?:ngày|ngay|mỗi ngày|moi ngay)\s+(?:uống|uong|dùng|dung|\d).*$',
        re.IGNORECASE,
    ),
    re.compile(
        r'\s*[-–:,;.]\s*(?:sáng|trưa|chiều|tối|ngày|sang|trua|chieu|toi|ngay|mỗi ngày|moi ngay)\b.*$',
        re.IGNORECASE,
    ),
    re.compile(
        r'\s*\b(?:uống|uong|cách dùng|cach dung|liều dùng|lieu dung|hướng dẫn|huong dan'
        r'|ghi chú|ghi chu)\s*:.*$',
        re.IGNORECASE,
    ),
    re.compile(
        r'\s*[-–,;]?\s*\b(?:uống|uong|ngậm|ngam|bôi|boi|nhỏ|xịt|xit)\s+\d.*$',
        re.IGNORECASE,
    ),
]

# Quantity markers (raw text)
QUANTITY_UNITS = ("viên", "vien", "hộp", "hop", "chai", "gói", "goi", "lọ", "tuýp", "tuyp", "ống", "vỉ")
SL_QUANTITY_PATTERN = re.compile(r'\bSL\s*[:.]?\s*(\d+)\s*(?:' + '|'.join(QUANTITY_UNITS) + r')?', re.IGNORECASE)
UNIT_QUANTITY_PATTERN = re.compile(
    r'(?<![\d.,])(\d+)\s*(?:' + '|'.join(QUANTITY_UNITS) + r')(?![^\W\d_])',
    re.IGNORECASE,
)
TIMES_QUANTITY_PATTERN = re.compile(r'(?:^|\s)[x×]\s*(\d+)(?![\d.,]*\s*(?:mg|g|ml|mcg)\b)', re.IGNORECASE)

# Human-readable text for each match reason
MATCH_EXPLANATIONS = MappingProxyType({
    "same_name_same_dosage": "Same medicine name and same strength",
    "same_name_different_dosage": "Same medicine name, different strength",
    "same_name_unknown_dosage": "Same medicine name, strength not stated on one side",
    "similar_name": "Name closely resembles the prescribed medicine",
    "partial_name_match": "Name partially matches the prescribed medicine",
    "same_indication_same_dosage": "Same active ingredient or therapeutic group, same strength",
    "same_indication_different_dosage": "Same active ingredient or therapeutic group, different strength",
})
