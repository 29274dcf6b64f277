"""
bin_collector/core/config.py
═══════════════════════════════════════════════════════════════════════════════
Process configuration - everything comes from the environment.

  ADDRESS             → street address sent to Simbio (default "začret 69")
  SIMBIO_URL          → upstream endpoint
  HOST / PORT         → listen address for uvicorn
  REFRESH_INTERVAL_S  → seconds between refresh cycles (15 min)
  RETRY_COUNT         → fetch attempts per cycle
  RETRY_DELAY_S       → wait between failed attempts
  REQUEST_TIMEOUT_S   → per-call upstream timeout
  LOG_LEVEL           → root logger level
═══════════════════════════════════════════════════════════════════════════════
"""

import os
import pytz

LOCAL_TZ = pytz.timezone("Europe/Ljubljana")

# ── Upstream ──────────────────────────────────────────────────────────────────
DEFAULT_ADDRESS = "začret 69"
# Empty string counts as unset (Home Assistant add-on passes ADDRESS="")
ADDRESS = os.environ.get("ADDRESS", "").strip() or DEFAULT_ADDRESS

SIMBIO_URL    = os.environ.get("SIMBIO_URL", "https://www.simbio.si/sl/moj-dan-odvoza-odpadkov")
SIMBIO_ACTION = "simbioOdvozOdpadkov"

# ── Refresh policy ────────────────────────────────────────────────────────────
REFRESH_INTERVAL_S = float(os.environ.get("REFRESH_INTERVAL_S", 15 * 60))
RETRY_COUNT        = int(os.environ.get("RETRY_COUNT", 3))
RETRY_DELAY_S      = float(os.environ.get("RETRY_DELAY_S", 5))
REQUEST_TIMEOUT_S  = float(os.environ.get("REQUEST_TIMEOUT_S", 10))

# ── Server ────────────────────────────────────────────────────────────────────
HOST      = os.environ.get("HOST", "0.0.0.0")
PORT      = int(os.environ.get("PORT", 8081))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# ── Waste categories ──────────────────────────────────────────────────────────
# category key → (upstream field, display label)
CATEGORIES: dict[str, tuple[str, str]] = {
    "mko": ("next_mko", "Mešani komunalni odpadki"),
    "emb": ("next_emb", "Embalaža"),
    "bio": ("next_bio", "Biološki odpadki"),
}
