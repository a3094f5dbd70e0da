import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from careerflow.app.api.routes.route_logic.interview_session import get_session
from careerflow.app.core.auth import get_current_user_from_cookie
from careerflow.app.core.exceptions import RecordNotFoundError
from careerflow.app.database.database import get_db
from careerflow.app.models.interview_session import InterviewSession
from careerflow.app.models.user import User

log = logging.getLogger(__name__)


async def get_interview_for_user(
    interview_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user_from_cookie),
) -> InterviewSession:
    """
    Dependency to get a specific interview session for the current user.

    Args:
        interview_id (str): The unique identifier of the interview session.
        db (Session): The database session dependency.
        current_user (User): The current authenticated user.

    Returns:
        InterviewSession: The session if found and owned by the user.

    Raises:
        HTTPException: 404 if the session is not found or belongs to another user.

    """
    try:
        return get_session(db, user_id=current_user.id, session_id=interview_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
