from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.security import decode_access_token
from app.services.cosmos_store import DocumentStore, get_cosmos_store

bearer = HTTPBearer(auto_error=False)

def get_current_user(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> dict:
    if not creds:
        raise HTTPException(status_code=401, detail="Missing authorization token")
    try:
        return decode_access_token(creds.credentials)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid token")

def ensure_customer_access_or_403(user: dict, customer_id: str) -> None:
    if str(user.get("role") or "").upper() == "ADMIN":
        return
    own = str(user.get("customer_id") or "").strip()
    if not own or own != str(customer_id or "").strip():
        raise HTTPException(status_code=403, detail="Access to this customer is not allowed")

def get_store() -> DocumentStore:
    return get_cosmos_store()
