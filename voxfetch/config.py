"""Application configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths
DATA_DIR = Path(os.getenv("DATA_DIR", Path(__file__).parent.parent / "data"))
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", "output"))
BROWSER_PROFILE_DIR = DATA_DIR / "browser_profile"
CREDENTIALS_PATH = DATA_DIR / "credentials.dat"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Browser
BROWSER_HEADLESS = os.getenv("BROWSER_HEADLESS", "true").lower() == "true"
BROWSER_TIMEOUT = int(os.getenv("BROWSER_TIMEOUT", "30000"))
BROWSER_PERSISTENT = os.getenv("BROWSER_PERSISTENT", "false").lower() == "true"
BROWSER_VIEWPORT = {"width": 1280, "height": 800}
READER_VIEWPORT = {"width": 2800, "height": 2100}

# Login
LOGIN_URL = os.getenv("VOXFETCH_LOGIN_URL") or None
INSTITUTION_SLUG = os.getenv("VOXFETCH_INSTITUTION") or None
LOGIN_TIMEOUT_MS = int(os.getenv("VOXFETCH_LOGIN_TIMEOUT_MS", str(10 * 60 * 1000)))
LOGIN_POLL_MS = 1500

# Rendering
RENDER_ATTEMPTS = int(os.getenv("VOXFETCH_RENDER_ATTEMPTS", "30"))
RENDER_INTERVAL_MS = 200
STRICT_RENDER = os.getenv("VOXFETCH_STRICT_RENDER", "false").lower() == "true"
PAGE_SETTLE_MS = 200

# Credentials
KEYRING_SERVICE = os.getenv("VOXFETCH_KEYRING_SERVICE", "voxfetch")
ENV_EMAIL = os.getenv("VOXFETCH_EMAIL", "")
ENV_PASSWORD = os.getenv("VOXFETCH_PASSWORD", "")


def ensure_dirs():
    """Create required data directories if they don't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    BROWSER_PROFILE_DIR.mkdir(parents=True, exist_ok=True)
