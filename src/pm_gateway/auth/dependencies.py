"""FastAPI dependencies: get_current_user, require_admin.

Usage in any protected router:
    @router.post("/protected")
    async def protected(participant: Annotated[str, Depends(get_current_user)]):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from config.settings import settings
from src.pm_common.errors import AdminRequiredError, InvalidCredentialsError
from src.pm_gateway.auth.jwt_handler import decode_token

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(token: str = Depends(oauth2_scheme)) -> str:
    """Return the participant id carried in the Bearer token's subject."""
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
    return payload["sub"]


async def require_admin(current_user: str = Depends(get_current_user)) -> str:
    """Only the registry admin may create and resolve markets."""
    if current_user != settings.ADMIN_USER_ID:
        raise AdminRequiredError()
    return current_user
