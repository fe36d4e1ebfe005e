"""
Database models and connection.

SQLAlchemy models for every table the site uses, plus a small Database
wrapper that owns the engine and session factory.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from sqlalchemy import Boolean, DateTime, Integer, String, Text, create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from .errors import StorageError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Visitor(Base):
    """Unique visitor, one row per client address."""

    __tablename__ = "visitors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ip_address: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Post(Base):
    """Blog post."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, default="")
    date: Mapped[str] = mapped_column(String(32), default="")


class Project(Base):
    """Project link."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    url: Mapped[str] = mapped_column(String(512), default="")


class User(Base):
    """User account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)


class InvitationCode(Base):
    """Single-use signup invitation."""

    __tablename__ = "invitation_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Inquiry(Base):
    """Contact form submission."""

    __tablename__ = "inquiries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), default="")
    email: Mapped[str] = mapped_column(String(255), default="")
    message: Mapped[str] = mapped_column(Text, default="")
    ip_address: Mapped[str] = mapped_column(String(64), default="")
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


# Content written on first start when the tables are empty
SEED_POSTS = [
    {
        "slug": "quantitative-system-dynamics",
        "title": "Quantitative System Dynamics: Building a Software Development Firm",
        "content": (
            '<div class="space-y-4">'
            '<h2 class="text-xl font-bold text-yellow-300">Project: Quantitative System Dynamics</h2>'
            '<p class="text-gray-400">Date: 2025-10-05</p>'
            "<p>Building bespoke software for enterprise clients and developing internal and "
            "public tools to work with dynamical systems.</p>"
            '<h3 class="font-bold text-cyan-300">Core Features:</h3>'
            '<ul class="list-disc list-inside pl-4 space-y-1">'
            "<li>A client first approach.</li>"
            "<li>Architecting solutions to modern problems.</li>"
            "<li>Quantitative data analysis and development of dynamical systems.</li>"
            "</ul>"
            "<p>This project is an enterprise that requires most of my time, built by a small "
            "team of less than 5.</p></div>"
        ),
        "date": "2025-10-05",
    },
]

SEED_PROJECTS = [
    {
        "name": "github/nullrootvector",
        "description": "",
        "url": "https://github.com/nullrootvector",
    },
]


class Database:
    """
    Owns the SQLAlchemy engine and session factory.

    Usage:
        db = Database("sqlite:///./nrv.dev.db")
        db.create_all()
        with db.session() as session:
            ...
    """

    def __init__(self, url: str, echo: bool = False):
        """
        Initialize the database connection.

        Args:
            url: SQLAlchemy database URL
            echo: Log emitted SQL
        """
        self.url = url
        if url.startswith("sqlite"):
            # Request handlers share the engine across threads
            connect_args = {"check_same_thread": False, "timeout": 30}
            self.engine = create_engine(url, echo=echo, connect_args=connect_args)
        else:
            self.engine = create_engine(url, echo=echo, pool_pre_ping=True)

        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Open a session that commits on success and rolls back on error.

        SQLAlchemy errors are re-raised as StorageError.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self):
        """Create all tables that don't exist yet."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        logger.info("Database tables ready")

    def seed_content(self):
        """Insert the initial posts and projects when their tables are empty."""
        with self.session() as session:
            if not session.scalar(select(func.count()).select_from(Post)):
                logger.info("Migrating blog posts...")
                session.add_all(Post(**p) for p in SEED_POSTS)

            if not session.scalar(select(func.count()).select_from(Project)):
                logger.info("Migrating projects...")
                session.add_all(Project(**p) for p in SEED_PROJECTS)

    def close(self):
        """Dispose of pooled connections."""
        self.engine.dispose()


def init_database(url: str, seed: bool = True) -> Database:
    """
    Create a Database, its tables and (optionally) the initial content.

    Args:
        url: SQLAlchemy database URL
        seed: Write the initial posts/projects into empty tables

    Returns:
        Ready-to-use Database
    """
    db = Database(url)
    db.create_all()
    if seed:
        db.seed_content()
    return db

