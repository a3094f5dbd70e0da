import logging

from sqlalchemy.orm import Session

from careerflow.app.core.security import get_password_hash
from careerflow.app.models.user import User
from careerflow.app.schemas.user import UserCreate

log = logging.getLogger(__name__)


def user_count(db: Session) -> int:
    """Counts the total number of users in the database.

    Args:
        db (Session): The database session.

    Returns:
        int: The total number of users.

    """
    _msg = "user_count starting"
    log.debug(_msg)
    count = db.query(User).count()
    _msg = "user_count returning"
    log.debug(_msg)
    return count


def get_user_by_username(db: Session, username: str) -> User | None:
    """Retrieve a user from the database using their username.

    Args:
        db: Database session dependency used to query the database.
        username: The unique username to search for in the database.

    Returns:
        User | None: The User object if found, otherwise None.

    """
    _msg = f"Querying database for username: {username}"
    log.debug(_msg)
    return db.query(User).filter(User.username == username).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Retrieve a user from the database using their email address."""
    _msg = f"Querying database for email: {email}"
    log.debug(_msg)
    return db.query(User).filter(User.email == email).first()


def create_new_user(db: Session, user_data: UserCreate) -> User:
    """Create a new user in the database with the provided data.

    Args:
        db: Database session dependency used to persist the new user.
        user_data: Username, email, and plain-text password for the new user.

    Returns:
        User: The newly created User object with all fields populated.

    Notes:
        1. Hash the provided password with bcrypt.
        2. Add the new user, commit, and refresh it.
        3. Database access: Performs a write operation on the User table.

    """
    _msg = f"Creating new user: {user_data.username}"
    log.debug(_msg)
    db_user = User(
        username=user_data.username,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    _msg = f"Created user {user_data.username} with id {db_user.id}"
    log.debug(_msg)
    return db_user
