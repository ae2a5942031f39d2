# salesprogram/core/auth.py
from dataclasses import dataclass
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from salesprogram.config import settings

reusable_oauth2 = HTTPBearer()


@dataclass(frozen=True)
class Principal:
    """Caller identity taken from the bearer token and handed to each request explicitly."""
    subject: str
    role: str = "mentor"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


async def get_current_principal(
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
) -> Principal:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(
            token.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        raise credentials_exception

    subject = payload.get("sub")
    if subject is None:
        raise credentials_exception
    return Principal(subject=str(subject), role=payload.get("role", "mentor"))


async def get_current_admin(
    principal: Principal = Depends(get_current_principal)
) -> Principal:
    if not principal.is_admin:
        raise HTTPException(403, "Admin access required")
    return principal
