"""Anonymous visitor fingerprinting."""

import hashlib


def visitor_hash(ip, user_agent, accept_language):
    """SHA-256 hex digest of the trimmed ip, user agent and accept-language."""
    raw = "|".join(part.strip() for part in (ip, user_agent, accept_language))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()