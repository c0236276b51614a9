"""
Authentication service
"""
from typing import Optional
from sqlalchemy.orm import Session
from covergen.models.user import User
from covergen.schemas.user import UserCreate
from covergen.core.security import verify_password, get_password_hash, create_access_token
from covergen.core.exceptions import ValidationError
from covergen.core.ids import to_uuid
from covergen.core.config import settings
import structlog

logger = structlog.get_logger()


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def authenticate_user(self, username: str, password: str) -> Optional[User]:
        """Authenticate user with username and password"""
        user = self.db.query(User).filter(User.username == username).first()
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Authentication failed", username=username)
            return None
        logger.info("User authenticated", username=username)
        return user

    def create_user(self, user_create: UserCreate) -> User:
        """Create a new user"""
        if self.get_user_by_username(user_create.username):
            raise ValidationError("Username already registered")
        if self.get_user_by_email(user_create.email):
            raise ValidationError("Email already registered")

        db_user = User(
            username=user_create.username,
            email=user_create.email,
            hashed_password=get_password_hash(user_create.password),
        )
        self.db.add(db_user)
        self.db.commit()
        self.db.refresh(db_user)
        logger.info(
            "User created",
            user_id=str(db_user.id),
            username=db_user.username
        )
        return db_user

    def get_user_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        return self.db.query(User).filter(User.username == username).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        return self.db.query(User).filter(User.email == email).first()

    def get_user_by_id(self, user_id) -> Optional[User]:
        """Get user by ID"""
        user_uuid = to_uuid(user_id)
        if user_uuid is None:
            return None
        return self.db.query(User).filter(User.id == user_uuid).first()

    def create_access_token_for_user(self, user: User) -> str:
        """Create access token for user"""
        access_token = create_access_token(str(user.id))
        logger.info(
            "Access token created",
            user_id=str(user.id),
            expires_in_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )
        return access_token
