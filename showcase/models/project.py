"""Project model definitions."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from showcase.database import Base
from showcase.models.user import utcnow


TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000
COMMENT_MAX_LENGTH = 500
GITHUB_URL_PREFIX = "https://github.com/"

PROJECT_CATEGORIES = (
    "Web Development",
    "Mobile App",
    "AI/ML",
    "Data Science",
    "Game Development",
    "IoT",
    "Blockchain",
    "Other",
)
STATUS_DRAFT = "draft"
STATUS_PUBLISHED = "published"
PROJECT_STATUSES = (STATUS_DRAFT, STATUS_PUBLISHED)


class Project(Base):
    """Represents a portfolio entry with its embedded likes and comments.

    ``likes`` holds ``{"user": <id>, "createdAt": <iso>}`` entries, at most one
    per user. ``comments`` is append-only and holds
    ``{"id": <hex>, "user": <id>, "text": <str>, "createdAt": <iso>}`` entries.
    Both lists are replaced wholesale on every change so the ORM sees the
    write, and every UPDATE is conditional on ``version_id``.
    """
    __tablename__ = "projects"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    description = Column(String(DESCRIPTION_MAX_LENGTH), nullable=False)
    technologies = Column(JSON, nullable=False, default=list)
    category = Column(String, nullable=False)
    github_url = Column(String, nullable=True)
    live_url = Column(String, nullable=True)
    images = Column(JSON, nullable=False, default=list)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default=STATUS_PUBLISHED, index=True)
    featured = Column(Boolean, nullable=False, default=False)
    likes = Column(JSON, nullable=False, default=list)
    comments = Column(JSON, nullable=False, default=list)
    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    author = relationship("User", lazy="joined")

    __mapper_args__ = {"version_id_col": version_id}
