"""
Porter Stemmer for English (via NLTK).

Sphinx builds its English search index with the classic Porter algorithm,
so queries must be stemmed the same way for exact lookups to hit:
- "classification" → "classif"
- "circuits" → "circuit"
- "molecules" → "molecul"
"""

from nltk.stem.porter import PorterStemmer

# Initialize stemmer once (reusable, no per-call state)
_stemmer = PorterStemmer(mode=PorterStemmer.ORIGINAL_ALGORITHM)


def stem(word: str) -> str:
    """
    Stem a single lowercase word using the original Porter algorithm.

    Examples:
        >>> stem("classification")
        'classif'
        >>> stem("circuits")
        'circuit'
    """
    return _stemmer.stem(word)
