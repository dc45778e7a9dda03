"""Rate limiting of visitor actions per client address."""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from flask import request

from photosite.constants import (
    MSG_SUSPICIOUS_BEHAVIOR,
    MSG_TOO_MANY_BEHAVIOR_REQUESTS,
    ErrorCode,
)
from photosite.responses import error
from photosite.visitor_middleware import _client_ip, current_visitor_hash

DEFAULT_WINDOW_SECONDS = 60
DEFAULT_IP_LIMIT = 120
DEFAULT_SUSPICIOUS_IP_LIMIT = 20
_CLEANUP_THRESHOLD = 10000

_SUSPICIOUS_PATTERNS = (
    "python-requests",
    "go-http-client",
    "scrapy",
    "sqlmap",
    "nmap",
    "masscan",
    "nikto",
    "zgrab",
    "crawler",
    "spider",
    "bot/",
)

_NOP_LOGGER = logging.Logger("photosite.nop")
_NOP_LOGGER.disabled = True


@dataclass(frozen=True)
class BehaviorGuardConfig:
    """Limits on visitor actions; zero limits fall back to the defaults."""

    enabled: bool = False
    window_seconds: int = 0
    ip_limit_per_window: int = 0
    suspicious_ip_limit_per_window: int = 0

    @classmethod
    def default(cls):
        """Guard enabled with the default window and limits."""
        return cls(
            enabled=True,
            window_seconds=DEFAULT_WINDOW_SECONDS,
            ip_limit_per_window=DEFAULT_IP_LIMIT,
            suspicious_ip_limit_per_window=DEFAULT_SUSPICIOUS_IP_LIMIT,
        )


class IPWindowCounter:
    """Counts hits per key within fixed time windows."""

    def __init__(self, window_seconds):
        if window_seconds <= 0:
            window_seconds = DEFAULT_WINDOW_SECONDS
        self.window_seconds = window_seconds
        self._lock = threading.Lock()
        self._counters = {}

    def __len__(self):
        with self._lock:
            return len(self._counters)

    def increment(self, key, now):
        """Count one hit for ``key`` at ``now`` and return the count in its window."""
        bucket = int(now.timestamp()) // self.window_seconds
        with self._lock:
            current_bucket, count = self._counters.get(key, (None, 0))
            if current_bucket != bucket:
                count = 0
            count += 1
            self._counters[key] = (bucket, count)

            if len(self._counters) > _CLEANUP_THRESHOLD:
                expire_before = bucket - 2
                self._counters = {
                    k: v for k, v in self._counters.items() if v[0] >= expire_before
                }
        return count


def is_suspicious_user_agent(user_agent):
    """Whether a user agent looks automated, with the reason."""
    ua = user_agent.lower().strip()
    if not ua:
        return True, "empty user-agent"
    for pattern in _SUSPICIOUS_PATTERNS:
        if pattern in ua:
            return True, "matched pattern: " + pattern
    return False, ""


class BehaviorGuard:
    """A before-request hook that answers 429 when a client acts too often."""

    def __init__(self, logger, config):
        self.logger = logger if logger is not None else _NOP_LOGGER
        if config.window_seconds <= 0:
            config = replace(config, window_seconds=DEFAULT_WINDOW_SECONDS)
        if config.ip_limit_per_window <= 0:
            config = replace(config, ip_limit_per_window=DEFAULT_IP_LIMIT)
        if config.suspicious_ip_limit_per_window <= 0:
            config = replace(config, suspicious_ip_limit_per_window=DEFAULT_SUSPICIOUS_IP_LIMIT)
        self.config = config
        self._ip_limiter = IPWindowCounter(config.window_seconds)
        self._suspicious_limiter = IPWindowCounter(config.window_seconds)

    def __call__(self):
        cfg = self.config
        if not cfg.enabled:
            return None

        ip = _client_ip()
        ua = request.headers.get("User-Agent", "").strip()
        visitor = current_visitor_hash()
        base_fields = {
            "ip": ip,
            "path": request.path,
            "method": request.method,
            "visitor_hash": visitor,
        }

        count = self._ip_limiter.increment(ip, datetime.now(timezone.utc))
        if count > cfg.ip_limit_per_window:
            self.logger.warning(
                "behavior guard blocked by ip rate limit",
                extra={
                    "fields": {
                        **base_fields,
                        "count_in_window": count,
                        "limit": cfg.ip_limit_per_window,
                        "window_seconds": cfg.window_seconds,
                    }
                },
            )
            return error(
                429, ErrorCode.TOO_MANY_BEHAVIOR_REQUESTS, MSG_TOO_MANY_BEHAVIOR_REQUESTS
            )

        suspicious, reason = is_suspicious_user_agent(ua)
        if suspicious:
            suspicious_count = self._suspicious_limiter.increment(ip, datetime.now(timezone.utc))
            self.logger.warning(
                "behavior guard suspicious user-agent detected",
                extra={
                    "fields": {
                        **base_fields,
                        "reason": reason,
                        "user_agent": ua,
                        "count_in_window": suspicious_count,
                        "limit": cfg.suspicious_ip_limit_per_window,
                        "window_seconds": cfg.window_seconds,
                    }
                },
            )
            if suspicious_count > cfg.suspicious_ip_limit_per_window:
                return error(429, ErrorCode.SUSPICIOUS_BEHAVIOR, MSG_SUSPICIOUS_BEHAVIOR)
        return None