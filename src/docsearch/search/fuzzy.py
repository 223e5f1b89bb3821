"""Typo-tolerant term lookup using Jaro-Winkler similarity.

Only consulted when a stemmed query token has no exact hit in either
inverted index. The returned similarity (0.88-1.0) is used by the scorer
as a multiplicative damping factor on the match weight.
"""

from typing import Iterable, NamedTuple, Optional

from rapidfuzz.distance import JaroWinkler

FUZZY_THRESHOLD = 0.88
MAX_LENGTH_DIFFERENCE = 4


class FuzzyMatch(NamedTuple):
    key: str
    similarity: float


def fuzzy_match(token: str, keys: Iterable[str], threshold: float = FUZZY_THRESHOLD) -> Optional[FuzzyMatch]:
    """Find the indexed key most similar to ``token``.

    Linear scan over ``keys``. Candidates whose length differs from the token
    by more than four characters are skipped without computing similarity.
    On equal similarity the first key seen wins.

    Returns:
        Best match with similarity >= threshold, or None.

    Examples:
        >>> fuzzy_match("quantun", ["quantum", "circuit"])
        FuzzyMatch(key='quantum', similarity=0.942...)
        >>> fuzzy_match("zzz", ["quantum"]) is None
        True
    """
    best: Optional[FuzzyMatch] = None
    token_length = len(token)
    for key in keys:
        if abs(len(key) - token_length) > MAX_LENGTH_DIFFERENCE:
            continue
        similarity = JaroWinkler.similarity(token, key)
        if similarity >= threshold and (best is None or similarity > best.similarity):
            best = FuzzyMatch(key, similarity)
    return best
