"""Authentication API endpoints."""

from fastapi import APIRouter, HTTPException, status

from app.core.deps import DBSession
from app.schemas.auth import Token, UserLogin
from app.services.auth_service import AuthService

router = APIRouter()


@router.post("", response_model=Token)
async def login(
    credentials: UserLogin,
    db: DBSession,
) -> Token:
    """
    Exchange catalog credentials for a bearer token.

    - **id**: Username
    - **password**: User password

    The token carries the user id and role; paid downloads additionally
    depend on the purchases stored for that user.
    """
    token = await AuthService(db).login(credentials.id, credentials.password)

    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return token
