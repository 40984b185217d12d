"""Designetica runtime settings: tunable parameters for generation and probes.

All values read from environment variables with sensible defaults.
Import from here instead of hardcoding.

Infrastructure config (credentials, endpoints, host/port) stays in
designetica/config.py.
"""

from __future__ import annotations

import os


def _int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


def _str(key: str, default: str) -> str:
    return os.getenv(key, default)


def _ints(key: str, default: str) -> tuple[int, ...]:
    return tuple(int(p) for p in os.getenv(key, default).split(",") if p.strip())


# =====================================================================
# Generation Orchestrator (client side)
# =====================================================================

# Per-request timeout for POST /api/generate-wireframe (seconds)
GENERATION_TIMEOUT = _float("GENERATION_TIMEOUT", 90.0)

# Retries after the initial attempt (total attempts = retries + 1)
GENERATION_MAX_RETRIES = _int("GENERATION_MAX_RETRIES", 2)

# Backoff: min(base * 2^n + rand * jitter, cap) milliseconds
GENERATION_BACKOFF_BASE_MS = _int("GENERATION_BACKOFF_BASE_MS", 1000)
GENERATION_BACKOFF_JITTER_MS = _int("GENERATION_BACKOFF_JITTER_MS", 1000)
GENERATION_BACKOFF_CAP_MS = _int("GENERATION_BACKOFF_CAP_MS", 5000)

DEFAULT_THEME = _str("DEFAULT_THEME", "microsoft")
DEFAULT_COLOR_SCHEME = _str("DEFAULT_COLOR_SCHEME", "primary")


# =====================================================================
# Wireframe Cache
# =====================================================================

WIREFRAME_CACHE_TTL = _float("WIREFRAME_CACHE_TTL", 30 * 60.0)
WIREFRAME_CACHE_MAX_ENTRIES = _int("WIREFRAME_CACHE_MAX_ENTRIES", 256)


# =====================================================================
# Backend Reachability Detector (dev only)
# =====================================================================

BACKEND_PORT_CACHE_TTL = _float("BACKEND_PORT_CACHE_TTL", 10.0)
BACKEND_HEALTH_PROBE_TIMEOUT = _float("BACKEND_HEALTH_PROBE_TIMEOUT", 2.0)
BACKEND_AI_PROBE_TIMEOUT = _float("BACKEND_AI_PROBE_TIMEOUT", 5.0)
BACKEND_PRIMARY_PORT = _int("BACKEND_PRIMARY_PORT", 5001)
BACKEND_FALLBACK_PORT = _int("BACKEND_FALLBACK_PORT", 7072)
BACKEND_AUXILIARY_PORTS = _ints("BACKEND_AUXILIARY_PORTS", "7071,7073,3001,8000")
BACKEND_DEV_HOST = _str("BACKEND_DEV_HOST", "localhost")


# =====================================================================
# AI Generation (server side)
# =====================================================================

AI_MAX_TOKENS = _int("AI_MAX_TOKENS", 4000)
AI_TEMPERATURE = _float("AI_TEMPERATURE", 0.7)
AI_REQUEST_TIMEOUT = _float("AI_REQUEST_TIMEOUT", 60.0)

# AI output shorter than this is treated as insufficient and replaced by a fallback
MIN_AI_HTML_LENGTH = _int("MIN_AI_HTML_LENGTH", 500)

DESCRIPTION_MIN_LENGTH = _int("DESCRIPTION_MIN_LENGTH", 3)
DESCRIPTION_MAX_LENGTH = _int("DESCRIPTION_MAX_LENGTH", 1000)


# =====================================================================
# Figma
# =====================================================================

FIGMA_HTTP_TIMEOUT = _float("FIGMA_HTTP_TIMEOUT", 30.0)

# Token exchange is bounded; the provider default is unbounded
FIGMA_OAUTH_TIMEOUT = _float("FIGMA_OAUTH_TIMEOUT", 15.0)

# Unconsumed authorization states expire; the oldest are dropped past the cap
FIGMA_OAUTH_STATE_TTL = _float("FIGMA_OAUTH_STATE_TTL", 600.0)
FIGMA_OAUTH_MAX_PENDING_STATES = _int("FIGMA_OAUTH_MAX_PENDING_STATES", 1000)


# =====================================================================
# Health Monitor
# =====================================================================

MONITOR_LOG_LIMIT = _int("MONITOR_LOG_LIMIT", 100)
MONITOR_ALERT_LIMIT = _int("MONITOR_ALERT_LIMIT", 50)
MONITOR_INTERVAL = _float("MONITOR_INTERVAL", 300.0)
MONITOR_PROBE_TIMEOUT = _float("MONITOR_PROBE_TIMEOUT", 10.0)
MONITOR_SSL_WARNING_DAYS = _int("MONITOR_SSL_WARNING_DAYS", 30)
MONITOR_DATA_DIR = _str("MONITOR_DATA_DIR", "monitoring-data")
