"""
Auth Module - Service Layer
=============================
Admin credential checks and account creation.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from common.exceptions import ValidationError
from common.security import hash_password, verify_password, create_admin_token
from modules.admin.models import Admin

logger = logging.getLogger("quickshop.auth")


class AuthService:
    """Handles admin login, lookup and creation."""

    def login(self, db: Session, username: str, password: str) -> Optional[Admin]:
        """Return the Admin when the credentials match, otherwise None."""
        username = (username or "").strip()
        if not username or not password:
            return None

        admin = self.find_by_username(db, username)
        if not admin or not verify_password(password, admin.password_hash):
            logger.warning(f"Failed admin login for '{username}'")
            return None
        return admin

    def hash_password(self, password: str) -> str:
        return hash_password(password)

    def issue_token(self, admin: Admin) -> str:
        return create_admin_token(admin.username)

    def find_by_username(self, db: Session, username: str) -> Optional[Admin]:
        return db.query(Admin).filter(Admin.username == username).first()

    def create_admin(self, db: Session, username: str, password: str) -> Admin:
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required.")
        if not password or len(password) < 8:
            raise ValidationError("Password must be at least 8 characters.")
        if self.find_by_username(db, username):
            raise ValidationError(f"Admin '{username}' already exists.")

        admin = Admin(username=username, password_hash=self.hash_password(password))
        db.add(admin)
        db.flush()
        db.refresh(admin)
        return admin


# Singleton instance
auth_service = AuthService()
