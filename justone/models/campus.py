from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from justone.core.database import Base


class Campus(Base):
    """
    Seed data; one row per partner campus.

    Columns:
      id               TEXT: slug, e.g. "ashoka-sonipat"
      name             TEXT: display name
      location         TEXT: city shown next to the name
      allowed_domains  JSON: list of email domains accepted at sign-in
    """
    __tablename__ = "campuses"

    id:              Mapped[str]       = mapped_column(String(64), primary_key=True)
    name:            Mapped[str]       = mapped_column(String(120), nullable=False, unique=True)
    location:        Mapped[str]       = mapped_column(String(120), nullable=False, server_default="")
    allowed_domains: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Campus id={self.id!r} domains={self.allowed_domains!r}>"
