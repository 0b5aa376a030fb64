"""Two-level prompt sanitization for content-policy filters."""

import re

MASK = "[filtered]"
_LINE_SPLIT = re.compile(r"\n+")


def _pattern(terms: tuple[str, ...]) -> re.Pattern | None:
    terms = tuple(t for t in terms if t)
    if not terms:
        return None
    return re.compile("|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True)))


def sanitize_basic(text: str, flagged_terms: tuple[str, ...]) -> str:
    """Mask flagged terms in place."""
    pattern = _pattern(flagged_terms)
    if not text or pattern is None:
        return text
    return pattern.sub(MASK, text)


def sanitize_aggressive(text: str, flagged_terms: tuple[str, ...], max_chars: int = 3500) -> str:
    """Drop blank lines and every line containing a flagged term, then truncate."""
    if not text:
        return text
    pattern = _pattern(flagged_terms)
    lines = [
        line
        for line in _LINE_SPLIT.split(text)
        if line.strip() and (pattern is None or not pattern.search(line))
    ]
    return "\n".join(lines)[:max_chars]
