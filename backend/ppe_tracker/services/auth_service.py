# Overview: Admin panel credential check.

"""
Admin Credentials

The panel has a single admin account configured through the environment.

- ADMIN_PASSWORD_HASH: bcrypt hash, checked with bcrypt.checkpw
- ADMIN_PASSWORD_BASE64: legacy setting holding base64(password); compared
  in constant time. Used only when no bcrypt hash is configured.
"""

from __future__ import annotations

import base64
import hmac

import bcrypt
from flask import current_app


def hash_password(password: str) -> str:
    """Hash a password for ADMIN_PASSWORD_HASH (bcrypt, cost factor 12)."""
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in configuration
        return False


def check_admin_credentials(username: str | None, password: str | None) -> bool:
    config = current_app.config
    password_hash = config.get("ADMIN_PASSWORD_HASH")
    password_b64 = config.get("ADMIN_PASSWORD_BASE64")

    if not password_hash and not password_b64:
        current_app.logger.warning("Admin credentials are not set in environment variables.")
        return False
    if not username or password is None:
        return False

    if not hmac.compare_digest(str(username), str(config.get("ADMIN_USERNAME", "admin"))):
        return False

    if password_hash:
        return verify_password(str(password), password_hash)

    provided = base64.b64encode(str(password).encode('utf-8')).decode('ascii')
    return hmac.compare_digest(provided, password_b64)
