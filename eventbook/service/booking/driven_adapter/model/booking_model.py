from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from eventbook.platform.database.orm_db_setting import Base


UQ_BOOKING_CODE = 'uq_booking_booking_code'
UQ_BOOKING_IDEMPOTENCY_KEY = 'uq_booking_user_idempotency_key'
UQ_BOOKING_CONFIRMED_USER_EVENT = 'uq_booking_confirmed_user_event'


class BookingModel(Base):
    __tablename__ = 'booking'
    __table_args__ = (
        UniqueConstraint('booking_code', name=UQ_BOOKING_CODE),
        UniqueConstraint('user_id', 'idempotency_key', name=UQ_BOOKING_IDEMPOTENCY_KEY),
        # At most one confirmed booking per (user, event); cancelled rows do not count
        Index(
            UQ_BOOKING_CONFIRMED_USER_EVENT,
            'user_id',
            'event_id',
            unique=True,
            postgresql_where=text("status = 'confirmed'"),
            sqlite_where=text("status = 'confirmed'"),
        ),
        Index('ix_booking_user_created_at', 'user_id', 'created_at'),
        Index('ix_booking_event_created_at', 'event_id', 'created_at'),
        CheckConstraint('tickets >= 1', name='ck_booking_tickets_positive'),
        CheckConstraint("status IN ('confirmed', 'cancelled')", name='ck_booking_status'),
    )

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)  # UUID7
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey('event.id'), nullable=False)
    tickets: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    booking_code: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    idempotency_key: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    payment_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
