############################
# config_util.py
#  Loads the app config file and resolves settings
#  (config file > environment variable > default)
############################
import os, json
from pathlib import Path
import re

# --- config file: POS_CONFIG, else any *.config at the project root ---
_CFG_CACHE = None

def _strip_json_comments(s: str) -> str:
    s = re.sub(r"/\*.*?\*/", "", s, flags=re.S)     # drop /* ... */
    s = re.sub(r"^\s*//.*$", "", s, flags=re.M)     # drop // ...
    return s

def load_app_config() -> dict:
    """Find and read the JSON config (comments allowed). Cached after the first call."""
    global _CFG_CACHE
    if _CFG_CACHE is not None:
        return _CFG_CACHE

    candidates = []
    # 1) explicit path
    if os.getenv("POS_CONFIG"):
        candidates.append(Path(os.getenv("POS_CONFIG")))

    # 2) *.config files at the project root
    here = Path(__file__).resolve().parent
    project_root = here.parent
    for p in sorted(project_root.glob("*.config")):
        candidates.append(p)

    for p in candidates:
        if not p.exists():
            continue
        try:
            raw = _strip_json_comments(p.read_text(encoding="utf-8"))
            _CFG_CACHE = json.loads(raw)
            print(f"[Config] loaded {p}")
            return _CFG_CACHE
        except (OSError, ValueError) as e:
            print(f"[Config] skipped {p}: {e}")

    _CFG_CACHE = {}
    return _CFG_CACHE

def clear_config_cache():
    global _CFG_CACHE
    _CFG_CACHE = None

def get_setting(key: str, default=None):
    cfg = load_app_config()
    value = cfg.get(key)
    if value is None or value == "":
        value = os.getenv(key)
    if value is None or value == "":
        return default
    return value

def get_int_setting(key: str, default: int) -> int:
    value = get_setting(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        print(f"[Config] {key}={value!r} is not an integer, using {default}")
        return default

def get_row_limit(view: str, default: int) -> int:
    """Row cap of one view: ROW_LIMITS[view] > ROW_LIMIT_<VIEW> env > default."""
    limits = load_app_config().get("ROW_LIMITS") or {}
    value = limits.get(view)
    if value is None:
        value = os.getenv(f"ROW_LIMIT_{view.upper()}")
    if value is None:
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default

def get_users() -> list:
    """Login users from the config file (USERS list), empty when not configured."""
    users = load_app_config().get("USERS")
    return users if isinstance(users, list) else []
