import logging
from dataclasses import dataclass

from sqlalchemy import Column, String, Text

from careerflow.app.models import Base
from careerflow.app.models.history_record import HistoryRecordMixin

log = logging.getLogger(__name__)


@dataclass
class LinkedInPostData:
    """Dataclass to hold data for LinkedInPost initialization."""

    post: str
    tone: str
    project_details: str


class LinkedInPost(HistoryRecordMixin, Base):
    """A LinkedIn post the user chose to save.

    Attributes:
        post (str): The generated post text.
        tone (str): The tone it was generated with (professional, casual or hype).
        project_details (str): The project details the user supplied.

    """

    __tablename__ = "linkedin_posts"

    post = Column(Text, nullable=False)
    tone = Column(String(32), nullable=False)
    project_details = Column(Text, nullable=False)

    def __init__(self, user_id: int, data: LinkedInPostData):
        _msg = f"Initializing LinkedInPost for user_id: {user_id}"
        log.debug(_msg)

        self.user_id = user_id
        self.post = data.post
        self.tone = data.tone
        self.project_details = data.project_details
