from datetime import datetime, timedelta, timezone
from jose import jwt
from app.core.config import settings

ALGORITHM = "HS256"

def issue_access_token(sub: str, role: str, customer_id: str, expires_delta: timedelta = timedelta(hours=1)) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": sub,
        "role": role,
        "customer_id": customer_id,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(claims, settings.API_JWT_SECRET, algorithm=ALGORITHM)

def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.API_JWT_SECRET, algorithms=[ALGORITHM])
