from __future__ import annotations

from datetime import datetime, timezone


# ============================================================
# Logging
# ============================================================
def log(msg: str) -> None:
    ts = datetime.now().strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


# ============================================================
# Helpers
# ============================================================
def utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
