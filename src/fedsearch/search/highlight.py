"""Query-term highlighting for result titles and excerpts."""

import re

MIN_TERM_LENGTH = 3


def highlight_matches(text: str | None, query: str) -> str | None:
    """Wrap case-insensitive occurrences of each query term in ``<mark>`` tags.

    Terms shorter than three characters are ignored.
    """
    if not text or not query:
        return text

    terms = {w for w in query.lower().split() if len(w) >= MIN_TERM_LENGTH}
    if not terms:
        return text

    # Longest first so overlapping terms mark the widest match once
    pattern = re.compile(
        "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True)),
        re.IGNORECASE,
    )
    return pattern.sub(lambda m: f"<mark>{m.group(0)}</mark>", text)
