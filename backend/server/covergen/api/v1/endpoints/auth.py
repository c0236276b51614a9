"""
Authentication endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from covergen.core.config import settings
from covergen.db.session import get_db
from covergen.schemas.user import Token, User as UserSchema, UserCreate, UserLogin
from covergen.services.auth import AuthService

router = APIRouter()


@router.post("/register", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserCreate,
    db: Session = Depends(get_db)
):
    """
    Register a new user account
    """
    auth_service = AuthService(db)
    return auth_service.create_user(user_in)


@router.post("/login", response_model=Token)
async def login(
    user_credentials: UserLogin,
    db: Session = Depends(get_db)
):
    """
    User Login, returns a bearer token
    """
    auth_service = AuthService(db)
    user = auth_service.authenticate_user(
        username=user_credentials.username,
        password=user_credentials.password
    )

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
        )

    access_token = auth_service.create_access_token_for_user(user)
    return Token(
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )
