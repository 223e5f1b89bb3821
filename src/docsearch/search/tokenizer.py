"""
Query tokenizer.

Tokenization pipeline:
1. Lowercase conversion
2. Split on runs of non-word characters
3. Drop tokens shorter than 2 characters
4. Filter stopwords (common English function words)
5. Apply Porter stemming ("classification" → "classif")

Two views of the same pipeline:
- tokenize(): stems only, for index lookups
- tokenize_with_raw(): (raw, stem) pairs, for highlighting and for counting
  distinct stems in the scorer
"""

import re
from typing import List, NamedTuple

from .stemmer import stem

MIN_TOKEN_LENGTH = 2

STOPWORDS = frozenset([
    'a', 'an', 'the', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'of', 'with', 'is', 'are', 'was', 'were', 'be', 'been', 'being',
    'have', 'has', 'had', 'do', 'does', 'did', 'will', 'would', 'could',
    'should', 'may', 'might', 'can', 'this', 'that', 'these', 'those',
    'it', 'its', 'from', 'by', 'about', 'as', 'into', 'through',
    'during', 'before', 'after', 'above', 'below', 'up', 'down',
    'out', 'off', 'over', 'under', 'again', 'then', 'once', 'not',
    'no', 'nor', 'so', 'yet', 'both', 'either', 'each', 'all', 'more',
    'most', 'other', 'such', 'own', 'than', 'too', 'very', 'just',
    'how', 'what', 'when', 'where', 'which', 'who', 'why', 'if',
])

_SPLIT_PATTERN = re.compile(r'\W+')


class Token(NamedTuple):
    """Query token: surface form and its stem"""
    raw: str
    stem: str


def _surface_tokens(text: str) -> List[str]:
    return [
        t for t in _SPLIT_PATTERN.split(text.lower())
        if len(t) >= MIN_TOKEN_LENGTH and t not in STOPWORDS
    ]


def tokenize_with_raw(text: str) -> List[Token]:
    """
    Tokenize a query, keeping the unstemmed form of each token.

    Examples:
        >>> tokenize_with_raw("Classifying molecules")
        [Token(raw='classifying', stem='classifi'), Token(raw='molecules', stem='molecul')]
        >>> tokenize_with_raw("the and a")
        []
    """
    if not text:
        return []
    return [Token(raw=t, stem=stem(t)) for t in _surface_tokens(text)]


def tokenize(text: str) -> List[str]:
    """
    Tokenize a query into Porter stems.

    Args:
        text: Raw query string

    Returns:
        List of stems (may contain duplicates, in query order)

    Examples:
        >>> tokenize("Neural network classification")
        ['neural', 'network', 'classif']
        >>> tokenize("   ")
        []
    """
    return [token.stem for token in tokenize_with_raw(text)]
