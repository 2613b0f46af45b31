from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from shiptrack.db.session import SessionLocal
from shiptrack.core.security import decode_token
from shiptrack.db.models.user import User, Role
from shiptrack.crud.users import get_user
from shiptrack.services.access import UserContext

# Login lives in the identity service; tokens arrive already issued.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_current_user(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> User:
    try:
        payload = decode_token(token)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = get_user(db, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found/disabled")
    return user

def get_user_context(user: User = Depends(get_current_user)) -> UserContext:
    return UserContext(user_id=user.id, role=Role(user.role), department_id=user.department_id)
