from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from expense_tracker.crud import crud_user
from expense_tracker.db.core import get_db


# Stand-in for real authentication: the caller names its user in a header.
def get_current_user_id(
    x_user_id: int = Header(..., description="ID of the user making the request"),
    db: Session = Depends(get_db)
) -> int:
    if crud_user.read_db_user(db, user_id=x_user_id) is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
    return x_user_id
