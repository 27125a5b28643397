"""Security utilities: JWT tokens, password hashing, invite and reset codes."""

import secrets
import string
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from iharu.config import settings

PARENT_INVITE_PREFIX = "PRNT"
LEGACY_PARENT_INVITE_PREFIX = "HARU"
CHILD_INVITE_PREFIX = "CHLD"

INVITE_ALPHABET = string.ascii_uppercase + string.digits


# --- Password Hashing ---

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(password.encode(), hashed.encode())


# --- JWT Tokens ---

def create_access_token(user_id: str, family_id: str | None, role: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": user_id,
        "fam": family_id,
        "role": role,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


# --- Invite Codes ---

def generate_invite_code(prefix: str) -> str:
    """Prefix tag plus random A-Z0-9 characters, e.g. PRNT7K2Q."""
    suffix = "".join(
        secrets.choice(INVITE_ALPHABET) for _ in range(settings.invite_code_suffix_length)
    )
    return f"{prefix}{suffix}"


# --- Reset Code ---

def generate_reset_code() -> str:
    """Generate a random 6-digit password reset code."""
    num = secrets.randbelow(900000) + 100000
    return str(num)
