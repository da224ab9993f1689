"""
Heuristic field classifiers.

Each predicate answers "does this text look like field kind X?" for a single
cleaned OCR value. They work on an accent-folded form of Vietnamese text
("Đường Nguyễn Trãi" -> "duong nguyen trai") and only say yes on a strong
signal, because a false positive here makes the column guard corrupt a row
that was already correct.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Optional

_NON_WORD_RE = re.compile(r"[\W_]+", re.UNICODE)
_DIGIT_RE = re.compile(r"\d")
_DATE_RE = re.compile(r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}")
_CODE_CHARS_RE = re.compile(r"[A-Za-z0-9./-]+")

# Folded spellings; matched against the whole folded value.
KNOWN_NATIONALITIES = frozenset({
    "viet nam",
    "vietnam",
    "trung quoc",
    "lao",
    "campuchia",
    "cam pu chia",
    "thai lan",
    "myanmar",
    "malaysia",
    "singapore",
    "indonesia",
    "philippines",
    "han quoc",
    "trieu tien",
    "nhat ban",
    "dai loan",
    "hong kong",
    "an do",
    "nga",
    "hoa ky",
    "my",
    "anh",
    "phap",
    "duc",
    "uc",
    "canada",
    "khong quoc tich",
})

# Street, house, alley, apartment, building, hamlet and residential-group words.
# "duong" after "binh"/"hai" is the province name (Bình Dương, Hải Dương), not a street.
_STRONG_ADDRESS_RE = re.compile(
    r"\b(?:"
    r"(?<!binh )(?<!hai )duong|so nha|so \d+|hem|ngach|kiet|"
    r"can ho|chung cu|toa nha|toa|lo|"
    r"khu do thi|khu dan cu|khu pho|to dan pho|"
    r"thon|ap|khom|xom"
    r")\b"
)

_ADMINISTRATIVE_RE = re.compile(
    r"\b(?:phuong|xa|quan|huyen|tinh|thanh pho|tp|thi xa|thi tran)\b"
)

MIN_ADDRESS_DIGITS = 2
MIN_CODE_DIGITS = 3


def fold_text(value: Optional[str]) -> str:
    """
    Accent-fold, lowercase and collapse punctuation/whitespace.

    đ/Đ do not decompose under NFD, so they are mapped to d explicitly.
    """
    if not value:
        return ""
    text = value.replace("đ", "d").replace("Đ", "D")
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.lower()
    text = _NON_WORD_RE.sub(" ", text)
    return " ".join(text.split())


def count_digits(value: Optional[str]) -> int:
    if not value:
        return 0
    return len(_DIGIT_RE.findall(value))


def is_likely_nationality(value: Optional[str]) -> bool:
    """Closed-set exact match against known nationality names."""
    if not value or count_digits(value):
        return False
    return fold_text(value) in KNOWN_NATIONALITIES


def is_likely_detailed_address(value: Optional[str]) -> bool:
    """
    Street-level address rather than a bare locality.

    Administrative words alone are not enough: a quê quán such as
    "Xã A, Huyện B, Tỉnh C" has them too, but rarely carries digits.
    """
    if not value:
        return False
    folded = fold_text(value)
    if not folded:
        return False
    if _STRONG_ADDRESS_RE.search(folded):
        return True
    return bool(_ADMINISTRATIVE_RE.search(folded)) and count_digits(value) >= MIN_ADDRESS_DIGITS


def is_likely_hsct_code(value: Optional[str]) -> bool:
    """Alphanumeric registration-style code (Số HSCT)."""
    if not value:
        return False
    text = value.strip()
    if not text or _DATE_RE.search(text):
        return False
    if is_likely_nationality(text) or is_likely_detailed_address(text):
        return False
    if "hsct" in fold_text(text):
        return True
    digits = count_digits(text)
    if digits >= MIN_CODE_DIGITS:
        return True
    return bool(_CODE_CHARS_RE.fullmatch(text)) and digits > 0
