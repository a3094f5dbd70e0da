import logging
from dataclasses import dataclass

from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship

from careerflow.app.models import Base
from careerflow.app.models.history_record import HistoryRecordMixin

log = logging.getLogger(__name__)


@dataclass
class StoredResumeData:
    """Dataclass to hold data for StoredResume initialization."""

    file_name: str
    mime_type: str
    data_uri: str
    text_content: str
    size_bytes: int


class StoredResume(HistoryRecordMixin, Base):
    """A resume file uploaded by the user.

    Attributes:
        file_name (str): The original file name.
        mime_type (str): MIME type taken from the data URI.
        data_uri (str): The `data:<mime>;base64,<payload>` URI as uploaded.
        text_content (str): Plain text extracted on upload.
        size_bytes (int): Decoded payload size.
        user (User): The owning user.

    """

    __tablename__ = "stored_resumes"

    file_name = Column(String(255), nullable=False)
    mime_type = Column(String(128), nullable=False)
    data_uri = Column(Text, nullable=False)
    text_content = Column(Text, nullable=False)
    size_bytes = Column(Integer, nullable=False)

    user = relationship("User", back_populates="stored_resumes")

    def __init__(self, user_id: int, data: StoredResumeData):
        _msg = f"Initializing StoredResume '{data.file_name}' for user_id: {user_id}"
        log.debug(_msg)

        self.user_id = user_id
        self.file_name = data.file_name
        self.mime_type = data.mime_type
        self.data_uri = data.data_uri
        self.text_content = data.text_content
        self.size_bytes = data.size_bytes
