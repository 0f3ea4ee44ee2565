"""
Relevance ranking for fuzzy file matches.

A pattern fuzzily matches a text when all of its characters occur in the text
in order (case-insensitive). The score rewards runs of consecutive matched
characters: each hit grows the running bonus (1, 3, 7, 15, ...), a miss resets
it, and the score is the sum of the running bonus over the whole text. A text
equal to the pattern scores infinity. Non-matching texts score 0, which is
below every real match.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

NO_MATCH_SCORE = 0.0


@dataclass(frozen=True)
class FuzzyMatch:
    text: str
    score: float


def fuzzy_match(pattern: str, text: str) -> Optional[FuzzyMatch]:
    if text is None:
        return None
    compare_pattern = (pattern or "").lower()
    compare_text = text.lower()
    pattern_idx = 0
    run = 0
    total = 0
    for ch in compare_text:
        if pattern_idx < len(compare_pattern) and ch == compare_pattern[pattern_idx]:
            pattern_idx += 1
            run += 1 + run
        else:
            run = 0
        total += run

    if pattern_idx != len(compare_pattern):
        return None
    score = float("inf") if compare_text == compare_pattern else float(total)
    return FuzzyMatch(text=text, score=score)


def fuzzy_test(pattern: str, text: str) -> bool:
    return fuzzy_match(pattern, text) is not None


def score(text: str, pattern: str) -> float:
    match = fuzzy_match(pattern, text)
    return NO_MATCH_SCORE if match is None else match.score


def compare(a: str, b: str, pattern: str) -> float:
    """Descending-score comparator: negative when `a` ranks before `b`."""
    score_a = score(a, pattern)
    score_b = score(b, pattern)
    if score_a == score_b:
        return 0
    return score_b - score_a


def sort_fuzzy_matches(items: Iterable[str], pattern: str) -> List[str]:
    """Order by descending score; equal scores fall back to lexicographic order."""
    scored = {item: score(item, pattern) for item in items}
    return sorted(scored, key=lambda item: (-scored[item], item))
