from typing import List, Optional
from sqlalchemy.orm import Session
from app.core.security import get_password_hash, verify_password
from app.crud.base import CRUDBase
from app.models.user import User, ROLE_ADMIN, ROLE_USER
from app.schemas.user import UserCreate


class CRUDUser(CRUDBase[User, UserCreate, UserCreate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    def get_admins(self, db: Session) -> List[User]:
        return db.query(User).filter(User.role == ROLE_ADMIN).order_by(User.id).all()

    def create(self, db: Session, *, obj_in: UserCreate, role: str = ROLE_USER) -> User:
        data = obj_in.model_dump(exclude={"password"})
        data["email"] = data["email"].lower()
        db_obj = User(
            **data,
            hashed_password=get_password_hash(obj_in.password),
            role=role,
            is_verified=role == ROLE_ADMIN,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def authenticate(self, db: Session, *, email: str, password: str) -> Optional[User]:
        db_user = self.get_by_email(db, email=email)
        if not db_user or not verify_password(password, db_user.hashed_password):
            return None
        return db_user


user = CRUDUser(User, label="Usuario")
