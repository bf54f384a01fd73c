"""
SQLAlchemy-backed repositories.

Tables mirror the pydantic schemas one to one. Nested consultant data
(weekly availability, SLA terms, channels) and a booking's structured
``required_info`` are stored as JSON columns. Rows are converted with
``model_validate`` so the core only ever sees schema objects.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    select,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from consulting_core.config import DatabaseConfig, settings
from consulting_core.schemas.analytics_schema import ConsultingTicket, Notification, TicketResponse
from consulting_core.schemas.booking_schema import (
    Consultant,
    ConsultantStatus,
    ConsultationBooking,
    ConsultationType,
)
from consulting_core.utils import utcnow

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


# ============================================================================
# Models
# ============================================================================

class ConsultantModel(Base):
    __tablename__ = "consultants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    full_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), default=ConsultantStatus.PENDING.value, nullable=False, index=True
    )
    availability: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSON, nullable=True)
    sla: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    channels: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)


class ConsultationTypeModel(Base):
    __tablename__ = "consultation_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    estimated_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    sla_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    base_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)


class BookingModel(Base):
    __tablename__ = "consultation_bookings"
    __table_args__ = (
        UniqueConstraint("ticket_number", name="uq_booking_ticket_number"),
        Index("ix_booking_consultant_date", "consultant_id", "scheduled_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticket_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    client_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    consultant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("consultants.id"), nullable=False
    )
    consultation_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("consultation_types.id"), nullable=False
    )
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    scheduled_time: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    duration_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    sla_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    first_response_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    subject: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    channel: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    required_info: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    package_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    package_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    package_sla_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    package_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=utcnow
    )


class TicketModel(Base):
    __tablename__ = "consulting_tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_number: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    client_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class TicketResponseModel(Base):
    __tablename__ = "ticket_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("consulting_tickets.id"), nullable=False, index=True
    )
    message: Mapped[str] = mapped_column(Text, default="", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class NotificationModel(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # "metadata" is reserved on declarative classes
    extra: Mapped[Optional[dict[str, Any]]] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


# ============================================================================
# Engine / session
# ============================================================================

class Database:
    """Owns the async engine and the session factory."""

    def __init__(self, config: Optional[DatabaseConfig] = None) -> None:
        config = config or settings.database
        engine_kwargs: dict[str, Any] = {"echo": config.echo}
        if ":memory:" in config.url:
            # a single shared connection, otherwise each session sees an empty database
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        self.engine: AsyncEngine = create_async_engine(config.url, **engine_kwargs)
        self.sessions: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine, expire_on_commit=False
        )
        logger.info("Database engine created for %s", self.engine.url.render_as_string())

    async def init_models(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


# ============================================================================
# Repositories
# ============================================================================

class SqlConsultantRepository:
    def __init__(self, database: Database) -> None:
        self._sessions = database.sessions

    async def add(self, consultant: Consultant) -> None:
        data = consultant.model_dump(mode="json")
        async with self._sessions() as session:
            await session.merge(ConsultantModel(**data))
            await session.commit()

    async def set_status(self, consultant_id: int, status: ConsultantStatus) -> None:
        async with self._sessions() as session:
            row = await session.get(ConsultantModel, consultant_id)
            if row is None:
                raise KeyError(f"Consultant {consultant_id} not found")
            row.status = status.value
            await session.commit()

    async def get_consultant_by_id(self, consultant_id: int) -> Optional[Consultant]:
        async with self._sessions() as session:
            row = await session.get(ConsultantModel, consultant_id)
            return Consultant.model_validate(row) if row is not None else None

    async def get_approved_consultants(self) -> list[Consultant]:
        stmt = select(ConsultantModel).where(
            ConsultantModel.status == ConsultantStatus.APPROVED.value
        )
        async with self._sessions() as session:
            result = await session.execute(stmt)
            return [Consultant.model_validate(row) for row in result.scalars().all()]


class SqlCatalogRepository:
    def __init__(self, database: Database) -> None:
        self._sessions = database.sessions

    async def add(self, consultation_type: ConsultationType) -> None:
        async with self._sessions() as session:
            await session.merge(ConsultationTypeModel(**consultation_type.model_dump()))
            await session.commit()

    async def get_consultation_type_by_id(self, type_id: int) -> Optional[ConsultationType]:
        async with self._sessions() as session:
            row = await session.get(ConsultationTypeModel, type_id)
            return ConsultationType.model_validate(row) if row is not None else None


class SqlBookingRepository:
    def __init__(self, database: Database) -> None:
        self._sessions = database.sessions

    @staticmethod
    def _to_row(record: ConsultationBooking) -> BookingModel:
        data = record.model_dump(exclude={"id"})
        data["status"] = _enum_value(record.status)
        data["channel"] = _enum_value(record.channel)
        return BookingModel(**data)

    async def set_status(self, booking_id: int, status: Any) -> None:
        async with self._sessions() as session:
            row = await session.get(BookingModel, booking_id)
            if row is None:
                raise KeyError(f"Booking {booking_id} not found")
            row.status = _enum_value(status)
            await session.commit()

    async def get_bookings_by_consultant(self, consultant_id: int) -> list[ConsultationBooking]:
        stmt = (
            select(BookingModel)
            .where(BookingModel.consultant_id == consultant_id)
            .order_by(BookingModel.id)
        )
        async with self._sessions() as session:
            result = await session.execute(stmt)
            return [ConsultationBooking.model_validate(row) for row in result.scalars().all()]

    async def get_all_bookings(self) -> list[ConsultationBooking]:
        async with self._sessions() as session:
            result = await session.execute(select(BookingModel).order_by(BookingModel.id))
            return [ConsultationBooking.model_validate(row) for row in result.scalars().all()]

    async def persist_booking(self, record: ConsultationBooking) -> int:
        row = self._to_row(record)
        async with self._sessions() as session:
            session.add(row)
            await session.commit()
        logger.debug("Persisted booking %s (%s)", row.id, row.ticket_number)
        return row.id


class SqlTicketRepository:
    def __init__(self, database: Database) -> None:
        self._sessions = database.sessions

    async def add_ticket(self, ticket: ConsultingTicket) -> None:
        data = ticket.model_dump()
        data["status"] = _enum_value(ticket.status)
        async with self._sessions() as session:
            await session.merge(TicketModel(**data))
            await session.commit()

    async def add_response(self, response: TicketResponse) -> None:
        async with self._sessions() as session:
            session.add(TicketResponseModel(**response.model_dump(exclude_none=True)))
            await session.commit()

    async def get_all_tickets(self) -> list[ConsultingTicket]:
        async with self._sessions() as session:
            result = await session.execute(select(TicketModel).order_by(TicketModel.id))
            return [ConsultingTicket.model_validate(row) for row in result.scalars().all()]

    async def get_ticket_responses(self, ticket_id: int) -> list[TicketResponse]:
        stmt = (
            select(TicketResponseModel)
            .where(TicketResponseModel.ticket_id == ticket_id)
            .order_by(TicketResponseModel.created_at, TicketResponseModel.id)
        )
        async with self._sessions() as session:
            result = await session.execute(stmt)
            return [TicketResponse.model_validate(row) for row in result.scalars().all()]


class SqlNotificationPublisher:
    """Stores notifications in the ``notifications`` table."""

    def __init__(self, database: Database) -> None:
        self._sessions = database.sessions

    async def publish_notification(self, notification: Notification) -> None:
        row = NotificationModel(
            title=notification.title,
            body=notification.body,
            severity=notification.severity.value,
            user_id=notification.user_id,
            extra=notification.metadata,
        )
        async with self._sessions() as session:
            session.add(row)
            await session.commit()
        logger.info("Notification stored: %s", notification.title)

    async def list_notifications(self) -> list[Notification]:
        async with self._sessions() as session:
            result = await session.execute(select(NotificationModel).order_by(NotificationModel.id))
            return [
                Notification(
                    title=row.title,
                    body=row.body,
                    severity=row.severity,
                    user_id=row.user_id,
                    metadata=row.extra,
                )
                for row in result.scalars().all()
            ]
