import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from justone.core.database import Base


class User(Base):
    """
    Sign-in account. Created on the first successful OTP verification;
    there is no password, every sign-in goes through an emailed code.
    """
    __tablename__ = "users"

    id:              Mapped[str]             = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email:           Mapped[str]             = mapped_column(String(320), unique=True, index=True, nullable=False)
    last_sign_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at:      Mapped[datetime]        = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
