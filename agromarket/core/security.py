from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import logging
from jose import JWTError, jwt
from passlib.context import CryptContext
from agromarket.models.user import Role
from agromarket.schemas.user import Identity

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def create_access_token(
    data: dict,
    *,
    secret_key: str,
    algorithm: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def create_identity_token(
    user, *, secret_key: str, algorithm: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Mint the bearer token carrying the claims `decode_identity` reads back."""
    role = user.role.value if isinstance(user.role, Role) else str(user.role)
    return create_access_token(
        {"sub": str(user.id), "email": user.email, "role": role},
        secret_key=secret_key,
        algorithm=algorithm,
        expires_delta=expires_delta,
    )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # Pre-hash with SHA256 to ensure we never exceed bcrypt's 72-byte limit
    password_sha256 = hashlib.sha256(plain_password.encode("utf-8")).hexdigest()
    return pwd_context.verify(password_sha256, hashed_password)


def get_password_hash(password: str) -> str:
    # Pre-hash with SHA256 to ensure we never exceed bcrypt's 72-byte limit
    # SHA256 always produces a fixed-length output (64 hex characters)
    password_sha256 = hashlib.sha256(password.encode("utf-8")).hexdigest()
    return pwd_context.hash(password_sha256)


def clean_credential(raw: Optional[str]) -> Optional[str]:
    """Strip quotes and an optional `Bearer` scheme from a header value."""
    if not raw:
        return None
    token = raw.replace('"', "").strip()
    if token[:7].lower() == "bearer ":
        token = token[7:].strip()
    return token or None


def decode_identity(raw: Optional[str], *, secret_key: str, algorithm: str) -> Optional[Identity]:
    """
    Turn a bearer credential into an `Identity`.

    Returns None for a missing credential and for any credential that fails
    verification; a bad token only demotes the caller to anonymous.
    """
    token = clean_credential(raw)
    if token is None:
        return None

    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError as e:
        logger.warning(f"Token verification failed: {e}")
        return None

    try:
        return Identity(
            id=int(payload["sub"]),
            email=payload["email"],
            role=Role(payload["role"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Token carries invalid claims: {e}")
        return None
