"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, String
from sqlalchemy.sql import func

from academy_cms.modules.accounts.models import Role

from .base import Base

_ROLE_VALUES = ", ".join(f"'{role.value}'" for role in Role)


def generate_uuid() -> str:
    return str(uuid.uuid4())


class AccountModel(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint(f"role IN ({_ROLE_VALUES})", name="ck_accounts_role"),
        CheckConstraint(
            "(reset_token_hash IS NULL) = (reset_token_expires_at IS NULL)",
            name="ck_accounts_reset_token_pair",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(254), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="User")
    reset_token_hash = Column(String(64), index=True)
    reset_token_expires_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
