from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.database import SessionLocal, get_db
from app.core.exceptions import AuthenticationError, UnauthorizedError
from app.core.constants import RoleEnum
from app.core.security import decode_access_token
from app.crud.user import user as user_crud
from app.models.user import User
from app.schemas.token import TokenPayload
from app.services.file_storage import FileStorageService, get_file_storage as build_file_storage

http_bearer = HTTPBearer()

__all__ = ["get_db", "get_transactional_db", "get_current_user", "require_roles", "get_file_storage"]


def get_transactional_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(http_bearer)
) -> User:
    try:
        payload = decode_access_token(credentials.credentials)
        token_data = TokenPayload(**payload)
    except JWTError:
        raise AuthenticationError()
    except ValidationError:
        raise AuthenticationError("Invalid token payload")

    if token_data.user_id is not None:
        user = user_crud.get(db, id=token_data.user_id)
    elif token_data.sub:
        user = user_crud.get_by_email(db, email=token_data.sub)
    else:
        raise AuthenticationError("Invalid token payload")

    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise UnauthorizedError("User account is inactive")
    return user


def require_roles(*roles: RoleEnum):
    """Dependency that restricts an endpoint to the given roles."""
    def _verify_role(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise UnauthorizedError("You do not have permission to perform this action.")
        return current_user
    return _verify_role


def get_file_storage() -> FileStorageService:
    return build_file_storage()
