from enum import Enum

from sqlalchemy import Enum as SAEnum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from justone.core.database import Base


class RoleName(str, Enum):
    ADMIN = "admin"
    STUDENT = "student"


class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )

    id:      Mapped[int]      = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str]      = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    role:    Mapped[RoleName] = mapped_column(
        SAEnum(RoleName, name="user_role_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
