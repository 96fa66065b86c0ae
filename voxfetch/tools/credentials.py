"""Credential lookup for the institution SSO login.

Sources, in order: explicit arguments, ``VOXFETCH_EMAIL``/``VOXFETCH_PASSWORD``
(``.env`` supported), the saved credentials, an interactive prompt.

Saved credentials live in the OS keyring (Keychain, Credential Manager,
Secret Service). When no keyring backend is usable they go to a
base64-encoded JSON file instead: that keeps the password out of casual
view, it is not encryption.
"""

from __future__ import annotations

import base64
import binascii
import getpass
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError
from pydantic import BaseModel, ValidationError

from ..config import CREDENTIALS_PATH, ENV_EMAIL, ENV_PASSWORD, KEYRING_SERVICE, LOG_LEVEL

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVEL)

KEYRING_ACCOUNT = "sso-credentials"


class Credentials(BaseModel):
    email: str
    password: str


def _yes(answer: str) -> bool:
    return answer.strip().lower() in ("y", "yes", "o", "oui")


def _parse(raw: str | bytes, origin: str) -> Optional[Credentials]:
    try:
        return Credentials(**json.loads(raw))
    except (ValueError, TypeError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable credentials in {origin}: {e}")
        return None


def save_credentials(creds: Credentials, path: Path = CREDENTIALS_PATH) -> str:
    """Store ``creds`` in the keyring, or in ``path`` without one.

    Returns where they went: ``"keyring"`` or ``"file"``.
    """
    try:
        keyring.set_password(KEYRING_SERVICE, KEYRING_ACCOUNT, creds.model_dump_json())
        logger.info("Credentials saved to the system keyring")
        return "keyring"
    except KeyringError as e:
        logger.warning(f"System keyring unavailable ({e}), saving to {path}")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(base64.b64encode(creds.model_dump_json().encode("utf-8")))
    os.chmod(path, 0o600)
    logger.info(f"Credentials saved to {path}")
    return "file"


def load_credentials(path: Path = CREDENTIALS_PATH) -> Optional[Credentials]:
    try:
        stored = keyring.get_password(KEYRING_SERVICE, KEYRING_ACCOUNT)
    except KeyringError as e:
        logger.debug(f"System keyring unavailable: {e}")
        stored = None
    if stored:
        creds = _parse(stored, "the system keyring")
        if creds:
            return creds

    if not path.exists():
        return None
    try:
        raw = base64.b64decode(path.read_bytes(), validate=True)
    except binascii.Error as e:
        logger.warning(f"Ignoring unreadable credentials file {path}: {e}")
        return None
    return _parse(raw, str(path))


def delete_credentials(path: Path = CREDENTIALS_PATH) -> bool:
    """Remove saved credentials from the keyring and the file; True if any existed."""
    deleted = False
    try:
        keyring.delete_password(KEYRING_SERVICE, KEYRING_ACCOUNT)
        logger.info("Credentials deleted from the system keyring")
        deleted = True
    except PasswordDeleteError:
        pass
    except KeyringError as e:
        logger.debug(f"System keyring unavailable: {e}")

    if path.exists():
        path.unlink()
        logger.info(f"Credentials deleted from {path}")
        deleted = True
    return deleted


def prompt_credentials(allow_save: bool = True, path: Path = CREDENTIALS_PATH) -> Credentials:
    email = input("Email: ").strip()
    password = getpass.getpass("Password: ")
    creds = Credentials(email=email, password=password)
    if allow_save and _yes(input("Save credentials for future use? (y/n): ")):
        save_credentials(creds, path)
    return creds


def get_credentials(
    email: Optional[str] = None,
    password: Optional[str] = None,
    path: Path = CREDENTIALS_PATH,
) -> Credentials:
    """Resolve credentials from arguments, environment, saved store, then prompt."""
    if email and password:
        return Credentials(email=email, password=password)

    if ENV_EMAIL and ENV_PASSWORD:
        logger.debug("Using credentials from environment")
        return Credentials(email=ENV_EMAIL, password=ENV_PASSWORD)

    stored = load_credentials(path)
    if stored:
        print(f"Found saved credentials for: {stored.email}", file=sys.stderr)
        if _yes(input("Use saved credentials? (y/n): ")):
            return stored
        if _yes(input("Delete saved credentials? (y/n): ")):
            delete_credentials(path)

    return prompt_credentials(path=path)
