"""Recover the text inserted between two full-document snapshots.

Two strategies are supported and selected by name
(``CaptureConfig.extraction_strategy``):

``positional``
    Assumes the episode only appended to ``base``.  Constant time, but
    returns garbage when text before the insertion point changed during
    the episode.

``char_diff``
    Character-level alignment via ``difflib.SequenceMatcher``.  Every run
    that appears only in ``final`` (inserts, and the new side of replaces)
    is concatenated in document order.  Quadratic in the worst case.
"""

from __future__ import annotations

import difflib

from suggestion_meter.configs.system import ExtractionStrategy


def extract_positional(base: str, final: str) -> str:
    return final[len(base):]


def extract_char_diff(base: str, final: str) -> str:
    if base == final:
        return ""
    # autojunk would treat frequent characters (spaces, newlines) as junk in
    # documents over 200 chars and misalign the inserted runs.
    matcher = difflib.SequenceMatcher(None, base, final, autojunk=False)
    return "".join(
        final[j1:j2]
        for tag, _i1, _i2, j1, j2 in matcher.get_opcodes()
        if tag in ("insert", "replace")
    )


_STRATEGIES = {
    "positional": extract_positional,
    "char_diff": extract_char_diff,
}


def extract_inserted(base: str, final: str, strategy: ExtractionStrategy) -> str:
    """Return the text inserted going from ``base`` to ``final``.

    Raises:
        ValueError: for an unknown strategy name.
    """
    try:
        extractor = _STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown extraction strategy: {strategy!r}") from None
    if base == final:
        return ""
    return extractor(base, final)
