"""Repositories for the records tasks reference (users, service requests)."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from studioboard.models.task import ServiceRequestSummary, UserSummary
from studioboard.database.models import ServiceRequestDB, UserDB

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[UserSummary]:
        """Get user by ID."""
        user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        return user_db.to_pydantic() if user_db else None

    def get_all(self) -> List[UserSummary]:
        """Get all users sorted by name."""
        return [user_db.to_pydantic() for user_db in self.db.query(UserDB).order_by(UserDB.name).all()]

    def create(self, name: str, email: Optional[str] = None, role: str = "user") -> UserSummary:
        """Create a user."""
        try:
            user_db = UserDB(name=name, email=email, role=role)
            self.db.add(user_db)
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"Created user {user_db.id}: {email}")
            return user_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user {email}: {type(e).__name__}: {str(e)}")
            raise


class ServiceRequestRepository:
    """Repository for ServiceRequest database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[ServiceRequestSummary]:
        """Get all service requests, newest first."""
        rows = self.db.query(ServiceRequestDB).order_by(ServiceRequestDB.created_at.desc()).all()
        return [row.to_pydantic() for row in rows]

    def create(self, title: str) -> ServiceRequestSummary:
        """Create a service request."""
        try:
            request_db = ServiceRequestDB(title=title)
            self.db.add(request_db)
            self.db.commit()
            self.db.refresh(request_db)
            logger.debug(f"Created service request {request_db.id}: {title[:50]}")
            return request_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create service request: {type(e).__name__}: {str(e)}")
            raise
