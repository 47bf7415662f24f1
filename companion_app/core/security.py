from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from loguru import logger
from companion_app.core.config import settings
from companion_app.core.exceptions import Unauthorized
from companion_app.models.caller import Caller

# Tokens are issued by the external identity service; auto_error is off so a
# missing header surfaces as our plain-text 401 instead of FastAPI's JSON one.
oauth2_scheme=OAuth2PasswordBearer(tokenUrl="/api/auth/token",auto_error=False)

def create_access_token(data:dict,expires_delta:Optional[timedelta]=None)->str:
    to_encode=data.copy()
    if expires_delta:
        expire=datetime.now(timezone.utc)+expires_delta
    else:
        expire=datetime.now(timezone.utc)+timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({
        "exp":expire
    })
    encoded_jwt=jwt.encode(to_encode,settings.SECRET_KEY,algorithm=settings.ALGORITHM)
    return encoded_jwt


def verify_token(token: str) -> dict:
    """Verifies and decodes a JWT token."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise Unauthorized()


async def get_current_caller(token:Optional[str]=Depends(oauth2_scheme))->Caller:
    """
    Dependency resolving the caller from the bearer token.
    A caller needs both an identifier (`sub`) and a display name
    (`first_name`); anything less is treated as unauthenticated.
    """
    if not token:
        raise Unauthorized()

    payload=verify_token(token=token)
    user_id=payload.get("sub")
    first_name=payload.get("first_name")
    if not user_id or not first_name:
        raise Unauthorized()
    return Caller(id=str(user_id),first_name=str(first_name))
