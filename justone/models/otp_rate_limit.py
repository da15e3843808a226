from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from justone.core.database import Base


class OtpRateLimit(Base):
    __tablename__ = "otp_rate_limits"

    id:            Mapped[int]      = mapped_column(Integer, primary_key=True, autoincrement=True)
    email:         Mapped[str]      = mapped_column(String(340), nullable=False, index=True)
    request_count: Mapped[int]      = mapped_column(Integer, nullable=False, default=1, server_default="1")
    window_start:  Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
