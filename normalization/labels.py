"""
normalization/labels.py

Canonical comparison keys for spreadsheet headers and row labels.
"""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_STRIPPED_CHARS_RE = re.compile(r"[%()]")
_NON_ALNUM_RE = re.compile(r"[^0-9a-z\s]")


def strip_accents(value: str) -> str:
    """
    Decompose accented characters and drop the combining marks.
    """

    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_label(raw: object) -> str:
    """
    Normalize a header or cell label into a comparison key.

    "Índice", "indice" and "INDICE" all produce "indice"; "% Meta PA (Semana)"
    produces "meta pa semana". The function is idempotent.
    """

    if raw is None:
        return ""

    text = str(raw).lower().strip()
    text = _WHITESPACE_RE.sub(" ", text)
    text = _STRIPPED_CHARS_RE.sub("", text)
    text = strip_accents(text)
    text = _NON_ALNUM_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()
