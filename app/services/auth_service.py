# app/services/auth_service.py
import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import Settings, get_settings
from app.schemas.context import UserContext

logger = logging.getLogger("tasktrack.auth")

bearer_scheme = HTTPBearer(auto_error=False)


class AuthService:
    """Verifica i token emessi dal provider di autenticazione esterno."""

    @staticmethod
    def decode_token(token: str, settings: Settings) -> UserContext:
        options = {"verify_aud": settings.jwt_audience is not None}
        try:
            payload = jwt.decode(
                token,
                settings.jwt_secret,
                algorithms=[settings.jwt_algorithm],
                audience=settings.jwt_audience,
                options=options,
            )
        except JWTError as e:
            logger.info("Token rifiutato: %s", e)
            raise PermissionError("Invalid authentication token") from e

        user_id = payload.get("sub")
        if not user_id:
            raise PermissionError("Token without subject")
        return UserContext(user_id=str(user_id), email=payload.get("email"))

    @staticmethod
    async def get_current_user(
        credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
        settings: Annotated[Settings, Depends(get_settings)],
    ) -> UserContext:
        if credentials is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            )
        try:
            return AuthService.decode_token(credentials.credentials, settings)
        except PermissionError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(e),
                headers={"WWW-Authenticate": "Bearer"},
            )
