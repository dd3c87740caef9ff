import logging
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.core.exceptions import AlreadyExistsError, AuthenticationError
from app.core.security import get_password_hash, verify_password, create_access_token
from app.crud.user import user as crud_user
from app.models.user import User
from app.schemas.token import LoginResponse, Token
from app.schemas.user import User as UserSchema, UserCreate
from app.services.audit_log import audit_log_service

logger = logging.getLogger(__name__)


class AuthService:
    def signup(self, db: Session, *, user_in: UserCreate, role: RoleEnum = RoleEnum.USER) -> User:
        if crud_user.get_by_email(db, email=user_in.email):
            raise AlreadyExistsError("A user with this email already exists.")

        new_user = crud_user.create(
            db,
            obj_in={
                "full_name": user_in.full_name,
                "email": user_in.email.lower(),
                "hashed_password": get_password_hash(user_in.password),
                "role": role,
                "is_active": True,
            },
            commit=False,
        )
        audit_log_service.record(db, new_user, f"Signed up as {role.value}")
        db.commit()
        db.refresh(new_user)
        logger.info(f"Created {role.value} account {new_user.id}")
        return new_user

    def login(self, db: Session, *, email: str, password: str) -> LoginResponse:
        user = crud_user.get_by_email(db, email=email)
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Incorrect email or password")

        if not user.is_active:
            raise AuthenticationError("User is inactive")

        return LoginResponse(token=self.create_token(user), user=UserSchema.model_validate(user))

    def create_token(self, user: User) -> Token:
        token_payload = {"user_id": user.id, "role": user.role.value}
        access_token = create_access_token(data=token_payload, email=user.email)
        return Token(access_token=access_token, token_type="bearer")

auth_service = AuthService()
