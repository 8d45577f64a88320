"""
API token hashing utilities.

Security notes:
  • SHA-256 is used for token hashing — acceptable because tokens are
    high-entropy random strings (not low-entropy passwords).
    bcrypt/argon2 would add latency to every webhook delivery.
  • Plaintext tokens use the mc_live_ prefix (recognisability, not security)
    followed by 24 random bytes as URL-safe base64 without padding.
  • generate_api_token() returns the plaintext exactly once — the caller
    must show it to the user immediately. It is never stored.
"""

import base64
import hashlib
import secrets

TOKEN_PREFIX = "mc_live_"
TOKEN_RANDOM_BYTES = 24
DISPLAY_PREFIX_LENGTH = 8


def hash_api_token(raw_token: str) -> str:
    """
    Hash a plaintext API token using SHA-256.

    Returns the hex digest string for storage/lookup.
    """
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def display_prefix(raw_token: str) -> str:
    """First characters of the plaintext, safe to show in listings."""
    return raw_token[:DISPLAY_PREFIX_LENGTH]


def generate_api_token() -> tuple[str, str]:
    """
    Generate a new API token.

    Returns:
        (raw_token, token_hash) — raw_token is shown once, token_hash is stored.
    """
    random_part = base64.urlsafe_b64encode(
        secrets.token_bytes(TOKEN_RANDOM_BYTES)
    ).decode("ascii").rstrip("=")
    raw_token = f"{TOKEN_PREFIX}{random_part}"
    return raw_token, hash_api_token(raw_token)
