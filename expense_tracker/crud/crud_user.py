from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional
from datetime import datetime
import bcrypt

from expense_tracker.db.core import UserDB
from expense_tracker.models.user import UserCreate
from expense_tracker.logging_config import get_logger

logger = get_logger(__name__)


# ===== PASSWORD HASHING =====

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


# ===== DATABASE OPERATIONS =====

def create_db_user(db: Session, user_data: UserCreate) -> UserDB:
    """Create a new user in the database"""

    existing_user = db.query(UserDB).filter(UserDB.email == user_data.email).first()
    if existing_user:
        raise ValueError("User already exists with this email")

    db_user = UserDB(
        email=user_data.email,
        name=user_data.name,
        password_hash=hash_password(user_data.password),
        currency=user_data.currency,
        monthly_budget=user_data.monthly_budget,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_user)
        db.commit()
        db.refresh(db_user)
    except IntegrityError:
        db.rollback()
        raise ValueError("User creation failed due to database constraint")

    logger.info(f"Created user {db_user.id}")
    return db_user


def read_db_user(db: Session, user_id: int = None, email: str = None) -> Optional[UserDB]:
    """Read a user by id or email"""

    query = db.query(UserDB)

    if user_id is not None:
        return query.filter(UserDB.id == user_id).first()
    elif email:
        return query.filter(UserDB.email == email.lower()).first()
    else:
        raise ValueError("Must provide at least one identifier (user_id or email)")
