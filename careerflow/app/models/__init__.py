import logging

from sqlalchemy.orm import declarative_base

log = logging.getLogger(__name__)

# Base model that other models will inherit from
Base = declarative_base()

# Import all models here to ensure they are registered with SQLAlchemy's metadata
from .interview_session import InterviewSession  # noqa
from .linkedin_post import LinkedInPost  # noqa
from .mock_interview import MockInterviewRecord  # noqa
from .resume_analysis import ResumeAnalysis  # noqa
from .skill_gap_roadmap import SkillGapRoadmap  # noqa
from .stored_resume import StoredResume  # noqa
from .user import User  # noqa
from .user_settings import UserSettings  # noqa
