"""
Content service.

Blog posts, projects, contact inquiries and the visitor counter.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from .base import BaseService
from ..database import Inquiry, Post, Project, Visitor

logger = logging.getLogger(__name__)


@dataclass
class PostEntry:
    """Blog post as served to the site."""
    id: int
    title: str
    content: str
    date: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ProjectEntry:
    """Project as served to the site."""
    id: int
    name: str
    description: str
    url: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class InquiryEntry:
    """Stored contact form submission."""
    name: str
    email: str
    message: str
    ip_address: str
    timestamp: str


class ContentService(BaseService):
    """
    Service for site content.

    All methods raise StorageError when the database fails.
    """

    def get_posts(self) -> Dict[str, PostEntry]:
        """Get all posts keyed by slug."""
        with self.db.session() as session:
            rows = session.scalars(select(Post).order_by(Post.id)).all()
            return {
                row.slug: PostEntry(id=row.id, title=row.title, content=row.content, date=row.date)
                for row in rows
            }

    def get_projects(self) -> List[ProjectEntry]:
        """Get all projects."""
        with self.db.session() as session:
            rows = session.scalars(select(Project).order_by(Project.id)).all()
            return [
                ProjectEntry(id=row.id, name=row.name, description=row.description, url=row.url)
                for row in rows
            ]

    def add_inquiry(self, name: str, email: str, message: str, ip_address: str):
        """
        Store a contact form submission.

        Args:
            name: Sender name
            email: Sender email
            message: Message body
            ip_address: Client address the form was posted from
        """
        with self.db.session() as session:
            session.add(Inquiry(
                name=name,
                email=email,
                message=message,
                ip_address=ip_address,
                timestamp=datetime.utcnow()
            ))
        logger.info(f"Inquiry received from {ip_address}")

    def list_inquiries(self) -> List[InquiryEntry]:
        """Get all stored inquiries, oldest first."""
        with self.db.session() as session:
            rows = session.scalars(select(Inquiry).order_by(Inquiry.id)).all()
            return [
                InquiryEntry(
                    name=row.name,
                    email=row.email,
                    message=row.message,
                    ip_address=row.ip_address,
                    timestamp=row.timestamp.isoformat() if row.timestamp else ""
                )
                for row in rows
            ]

    def record_visitor(self, ip_address: str) -> bool:
        """
        Record a visitor address once.

        Returns:
            True if this address was new
        """
        with self.db.session() as session:
            if session.scalar(select(Visitor.id).where(Visitor.ip_address == ip_address)):
                return False
            session.add(Visitor(ip_address=ip_address, timestamp=datetime.utcnow()))
            try:
                session.flush()
            except IntegrityError:
                # Lost a race with a concurrent request from the same address
                session.rollback()
                return False
        return True

    def count_visitors(self) -> int:
        """Count unique visitors."""
        with self.db.session() as session:
            return session.scalar(select(func.count()).select_from(Visitor)) or 0
