"""
normalizer.py
--------------
Turns a free-text transaction description into the key used to group
charges from the same payee.

Known approximation: digits are stripped before grouping, so descriptions
that differ only by an embedded order or reference number collapse into the
same key. Two different merchants that normalize to the same string are
merged as well. The noise-word list is English-only.
"""

import re


NOISE_WORDS = ("payment", "bill", "autopay", "recurring")

_DIGITS = re.compile(r"\d+")
_NOISE = re.compile(r"\b(" + "|".join(NOISE_WORDS) + r")\b")
_WHITESPACE = re.compile(r"\s+")


def normalize_description(description: str | None) -> str:
    """
    Canonical grouping key for a description.

    Lower-cases, removes digits, removes the stand-alone noise words,
    collapses whitespace and trims. Empty or missing input gives "".
    """
    if not description:
        return ""

    key = description.lower()
    key = _DIGITS.sub("", key)
    key = _NOISE.sub("", key)
    key = _WHITESPACE.sub(" ", key)
    return key.strip()
