from fastapi import Header, HTTPException, status


def get_user_id(user_id: str | None = Header(default=None, alias="x-user-id")) -> str:
    """Caller identity forwarded by the auth gateway in front of this API."""
    user_id = (user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id
