"""System-wide constants. All magic numbers and strings live here."""

from __future__ import annotations

# ── Limits ───────────────────────────────────────────────────────
UNLIMITED_SENTINEL = -1             # wire/storage encoding of "no cap"

# ── Plan Identifiers ─────────────────────────────────────────────
PLAN_FREE = "free"
PLAN_BASE = "base"
PLAN_PRO = "pro"
PLAN_ENTERPRISE = "enterprise"

# Older organization rows carry these identifiers
LEGACY_PLAN_ALIASES: dict[str, str] = {
    "basic": PLAN_BASE,
    "premium": PLAN_PRO,
}

# ── Sector Identifiers ───────────────────────────────────────────
SECTOR_FALLBACK = "other"

# ── Usage Aggregation ────────────────────────────────────────────
DEFAULT_USAGE_FETCH_TIMEOUT = 10.0  # seconds

# ── HTTP ─────────────────────────────────────────────────────────
PRINCIPAL_HEADER = "X-Principal-Id"
API_VERSION = "0.1.0"
