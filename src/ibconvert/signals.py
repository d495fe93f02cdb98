"""Citation signal codes and their printable phrases.

A signal is the short introductory phrase of a legal citation ("see",
"cf.", "but see") that classifies how the cited authority relates to the
text.  Citation descriptors carry a compact code for the signal instead of
the phrase itself; this module maps between the two.

Forward direction (code -> phrase) is used when rendering, reverse direction
(phrase -> code) when classifying the free-text prefix of a citation item.
"""
from __future__ import annotations

import re

# Fallback code when a prefix carries no recognizable signal.  It has no
# phrase of its own and is never a match target.
NO_SIGNAL = "none"

SIGNAL_PHRASES: dict[str, str] = {
    "eg": "e.g.",
    "accord": "accord",
    "see": "see",
    "seealso": "see also",
    "seeeg": "see, e.g.",
    "cf": "cf.",
    "contra": "contra",
    "butsee": "but see",
    "seegenerally": "see generally",
    "Eg": "E.g.",
    "Accord": "Accord",
    "See": "See",
    "Seealso": "See also",
    "Seeeg": "See, e.g.",
    "Cf": "Cf.",
    "Contra": "Contra",
    "Butsee": "But see",
    "Butseeeg": "But see, e.g.",
    "Seegenerally": "See generally",
    "butcf": "but cf.",
    "compare": "compare",
    "Butcf": "But cf.",
    "Compare": "Compare",
    # Connectors
    "with": "with",
    "and": "and",
    # Subsequent history
    "affirmed": "aff'd",
    "affirming": "aff'g",
    "certdenied": "cert. denied",
    "reversed": "rev'd",
    "other": "on other grounds",
    "subnom": "sub nom.",
    # Pseudo-signals
    "description": "Description of content,",
    "semicolon": "; ",
}

_TRAILING_RE = re.compile(r"[\s,]*$")


def _match_key(phrase: str) -> str:
    return _TRAILING_RE.sub("", phrase, count=1)


REVERSE_SIGNALS: dict[str, str] = {
    _match_key(phrase): code for code, phrase in SIGNAL_PHRASES.items()
}

# Longest keys first: at the leftmost match position the longest phrase
# wins, so "See also" is not read as "See".
SIGNAL_PATTERN: re.Pattern[str] = re.compile(
    "("
    + "|".join(
        re.escape(key)
        for key in sorted(REVERSE_SIGNALS, key=lambda k: (-len(k), k))
    )
    + ")"
)


def signal_code_for(prefix: str | None) -> str:
    """Classify a citation prefix, returning its signal code.

    >>> signal_code_for("see ")
    'see'
    >>> signal_code_for("See also, ")
    'Seealso'
    >>> signal_code_for("")
    'none'
    """
    if not prefix:
        return NO_SIGNAL
    m = SIGNAL_PATTERN.search(prefix)
    if m is None:
        return NO_SIGNAL
    return REVERSE_SIGNALS[m.group(1)]
