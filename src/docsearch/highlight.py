"""Split result titles into plain/highlighted segments for display"""

import re
from typing import List, NamedTuple


class Segment(NamedTuple):
    text: str
    highlighted: bool


def highlight(text: str, query_words: List[str]) -> List[Segment]:
    """
    Split text into alternating segments around raw (unstemmed) query words.

    Matching is case-insensitive and partial. A segment counts as highlighted
    when it starts with the first three characters of any query word, so a
    split that lands mid-word still marks the word.

    Example:
        >>> highlight("Quantum Kernel Training", ["kernel", "train"])
        [Segment(text='Quantum ', highlighted=False),
         Segment(text='Kernel', highlighted=True),
         Segment(text=' ', highlighted=False),
         Segment(text='Train', highlighted=True),
         Segment(text='ing', highlighted=False)]
    """
    escaped = [re.escape(w) for w in query_words if len(w) >= 2]
    if not escaped:
        return [Segment(text, False)]

    pattern = re.compile(f"({'|'.join(escaped)})", re.IGNORECASE)
    prefixes = [w.lower()[:3] for w in query_words]

    return [
        Segment(part, any(part.lower().startswith(p) for p in prefixes))
        for part in pattern.split(text)
        if part
    ]
