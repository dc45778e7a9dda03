"""Keyword parsing for the photo search box."""

import re

# Separators: ASCII comma, ASCII whitespace, full-width comma, ideographic enumeration comma.
_KEYWORD_SPLITTER = re.compile(r"[,\t\n\f\r ，、]+")

MAX_KEYWORDS = 5


def parse_keywords(raw):
    """Split ``raw`` into at most five distinct keywords, keeping their order."""
    result = []
    seen = set()
    for part in _KEYWORD_SPLITTER.split(raw.strip()):
        word = part.strip()
        if not word or word in seen:
            continue
        seen.add(word)
        result.append(word)
        if len(result) >= MAX_KEYWORDS:
            break
    return result