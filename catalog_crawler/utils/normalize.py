from __future__ import annotations

import re
import unicodedata

_UNSAFE_RUN = re.compile(r"[^a-zA-Z0-9_-]+")
_HYPHEN_RUN = re.compile(r"-+")
_NOT_PRICE_CHAR = re.compile(r"[^\d,.\-]", re.ASCII)
_CANONICAL_PRICE = re.compile(r"-?\d+,\d{2}", re.ASCII)


def sanitize_token(value: str | None) -> str:
    """
    Turn arbitrary text into a filesystem-safe token.

    >>> sanitize_token("Café Ação!")
    'cafe-acao'
    """
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    token = _HYPHEN_RUN.sub("-", _UNSAFE_RUN.sub("-", stripped))
    return token.strip("-").lower()


def normalize_price_br(raw: str | None) -> str:
    """
    Normalize raw price text to the Brazilian decimal-comma form "1234,56".

    A comma marks the decimal separator (dots are then thousands separators);
    without one the text is read as a dot-decimal number. Anything that does
    not end up as ``<digits>,<2 digits>`` yields an empty string.
    """
    s = _NOT_PRICE_CHAR.sub("", raw or "")
    if not s:
        return ""

    if "," in s:
        parts = s.replace(".", "").split(",")
        integer = parts[0]
        fraction = (parts[1] if len(parts) > 1 else "").ljust(2, "0")[:2]
        out = f"{integer},{fraction}"
    else:
        try:
            number = float(s)
        except ValueError:
            return ""
        out = f"{number:.2f}".replace(".", ",")

    return out if _CANONICAL_PRICE.fullmatch(out) else ""
