"""
Name Matching

Destinations, loading points and yard names arrive as free text typed by
clerks ("KOLWEZI ", "Lubumbash", "KOLWEZZII"). Every resolver goes through
the same three-tier lookup here:

1. exact match on the normalized key
2. substring containment in either direction (longest key wins)
3. fuzzy match on Levenshtein similarity

Author: Fuel Ledger Team
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..config import MatchingConfig
from ..models.allocation import MatchType


@dataclass(frozen=True)
class KeyMatch:
    """Outcome of looking up a value among configured keys"""

    key: Optional[str]
    match_type: MatchType
    similarity: float
    # (key, similarity) near misses, best first
    candidates: Tuple[Tuple[str, float], ...] = ()

    @property
    def matched(self) -> bool:
        return self.key is not None


def normalize_key(text: Optional[str]) -> str:
    """Uppercase, trim and collapse inner whitespace"""
    if not text:
        return ""
    return " ".join(str(text).upper().split())


def levenshtein(a: str, b: str) -> int:
    """Edit distance (insert / delete / substitute, unit cost)"""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (char_a != char_b),
                )
            )
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """
    Similarity in [0, 1]: 1 - levenshtein(a, b) / max(len(a), len(b)).

    Two empty strings are identical (1.0).
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def rank_candidates(
    value: str, keys: Iterable[str], matching: MatchingConfig
) -> List[Tuple[str, float]]:
    """Keys scoring at or above the suggestion threshold, best first"""
    scored = [
        (key, similarity(value, key))
        for key in keys
    ]
    # sorted() is stable, so equal scores keep configuration order
    scored = sorted(
        (item for item in scored if item[1] >= matching.suggestion_threshold),
        key=lambda item: item[1],
        reverse=True,
    )
    return scored[: matching.max_suggestions]


def _substring_match(value: str, keys: List[str], min_length: int) -> Optional[str]:
    best: Optional[str] = None
    for key in keys:
        shorter = min(len(value), len(key))
        if shorter < min_length:
            continue
        if key in value or value in key:
            if best is None or len(key) > len(best):
                best = key
    return best


def match_key(
    value: Optional[str], keys: Iterable[str], matching: MatchingConfig
) -> KeyMatch:
    """
    Look up `value` among `keys` (already normalized).

    Returns a KeyMatch with key=None and match_type DEFAULT when nothing
    matches; `candidates` is filled in either case.
    """
    normalized = normalize_key(value)
    key_list = list(keys)

    if not normalized or not key_list:
        return KeyMatch(key=None, match_type=MatchType.DEFAULT, similarity=0.0)

    if normalized in key_list:
        return KeyMatch(key=normalized, match_type=MatchType.EXACT, similarity=1.0)

    candidates = tuple(rank_candidates(normalized, key_list, matching))

    substring_key = _substring_match(
        normalized, key_list, matching.min_substring_length
    )
    if substring_key is not None:
        return KeyMatch(
            key=substring_key,
            match_type=MatchType.SUBSTRING,
            similarity=similarity(normalized, substring_key),
            candidates=candidates,
        )

    if candidates and candidates[0][1] >= matching.fuzzy_threshold:
        best_key, best_score = candidates[0]
        return KeyMatch(
            key=best_key,
            match_type=MatchType.FUZZY,
            similarity=best_score,
            candidates=candidates,
        )

    return KeyMatch(
        key=None,
        match_type=MatchType.DEFAULT,
        similarity=candidates[0][1] if candidates else 0.0,
        candidates=candidates,
    )


__all__ = [
    "KeyMatch",
    "normalize_key",
    "levenshtein",
    "similarity",
    "rank_candidates",
    "match_key",
]
