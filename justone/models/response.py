from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from justone.core.database import Base


class Response(Base):
    """
    One encrypted questionnaire submission per (user, questionnaire_version).

    answers_encrypted / photo_encrypted hold base64(nonce || ciphertext);
    responses_hash is the SHA-256 hex of the plaintext answers JSON.
    """
    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint("user_id", "questionnaire_version", name="uq_responses_user_version"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    campus_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("campuses.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
    questionnaire_version: Mapped[str] = mapped_column(String(64), nullable=False)

    answers_encrypted: Mapped[str] = mapped_column(Text, nullable=False)
    responses_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    photo_encrypted: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
