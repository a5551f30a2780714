"""User ORM model with role-scoped access."""

from enum import Enum

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class UserRole(str, Enum):
    """Roles a back-office user can hold."""

    SUPER_ADMIN = "super_admin"
    """Full access across all villages"""

    ADMIN = "admin"
    """Access scoped to the villages the user is responsible for"""

    OWNER = "owner"
    """Apartment owner"""

    RENTER = "renter"
    """Short or long term renter"""


class User(Base, BaseModel):
    """
    Any person known to the back office.

    Owners are referenced by apartments; admins manage villages. Only the owner
    relationship is used by the ledger, the rest is carried for the admin UI.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Full name",
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        comment="Login email",
    )
    role: Mapped[UserRole] = mapped_column(
        nullable=False,
        default=UserRole.OWNER,
        comment="super_admin, admin, owner or renter",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
    )

    # Relationships
    apartments: Mapped[list["Apartment"]] = relationship(  # noqa: F821
        "Apartment",
        back_populates="owner",
        foreign_keys="Apartment.owner_id",
    )

    __table_args__ = (Index("idx_user_role_active", "role", "is_active"),)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name!r}, role={self.role})>"


__all__ = ["User", "UserRole"]
