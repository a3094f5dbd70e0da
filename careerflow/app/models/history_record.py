import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import declared_attr

log = logging.getLogger(__name__)


def generate_record_id() -> str:
    """Return a new opaque record identifier."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


class HistoryRecordMixin:
    """Columns shared by every persisted history record.

    Attributes:
        id (str): Opaque generated identifier.
        user_id (int): The owning user. Every query on a history table is scoped by it.
        created_at (datetime): Creation timestamp, used for descending chronological ordering.

    """

    id = Column(String(36), primary_key=True, default=generate_record_id)
    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)

    @declared_attr
    def user_id(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
