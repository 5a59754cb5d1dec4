"""SQLAlchemy models for the ticket store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from agentboard.board.models import Ticket


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TicketRecord(Base):
    """Ticket row - the authoritative column and position of a ticket."""

    __tablename__ = "tickets"
    __table_args__ = (Index("ix_tickets_column_position", "column_id", "position"),)

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    column_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    moved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __init__(
        self,
        id: str,
        title: str = "",
        column_id: str | None = None,
        position: int = 0,
        body: str = "",
        moved_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id
        self.title = title
        self.column_id = column_id
        self.position = position
        self.body = body
        self.moved_at = moved_at

    def to_ticket(self) -> Ticket:
        """Convert to the board's Ticket model."""
        moved_at = self.moved_at
        if moved_at is not None and moved_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC
            moved_at = moved_at.replace(tzinfo=UTC)
        return Ticket(
            id=self.id,
            column_id=self.column_id,
            position=self.position,
            body=self.body,
            moved_at=moved_at,
            title=self.title,
        )

    def __repr__(self) -> str:
        return f"<TicketRecord(id={self.id!r}, column_id={self.column_id!r})>"
