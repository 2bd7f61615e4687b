from jose import jwt, JWTError
from typing import Optional, Dict, Any
from datetime import datetime, timedelta, timezone
from core.config import settings

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM

CONTEXT_TOKEN_EXPIRE_MINUTES = 60


class InvalidContextTokenError(Exception):
    pass


# ---------------- TOKEN CREATION ---------------- #


def create_context_token(customer_id: str, sales_channel_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=CONTEXT_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": customer_id, "sales_channel_id": sales_channel_id, "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


# ---------------- TOKEN DECODING ---------------- #
def decode_context_token(token: str) -> Dict[str, Any]:
    """Decode a customer context token; expired or tampered tokens raise InvalidContextTokenError"""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise InvalidContextTokenError(str(e)) from e

    if not payload.get("sub"):
        raise InvalidContextTokenError("Token has no subject")
    return payload
