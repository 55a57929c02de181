from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, ForeignKeyConstraint, Index, Numeric, PrimaryKeyConstraint, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime
import decimal
import uuid

from .db_enums import (
    SessionStatusEnum,
    LedgerEntryTypeEnum,
    ReminderStatusEnum,
    ReminderChannelEnum,
    WhatsAppNotificationStatusEnum,
    WhatsAppReminderOptionEnum,
    LanguageEnum,
)

def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)

class Base(DeclarativeBase):
    pass



class Profiles(Base):
    __tablename__ = 'profiles'
    __table_args__ = (
        CheckConstraint("language IN ('en', 'ar', 'fr')", name='valid_language'),
        PrimaryKeyConstraint('id', name='profiles_pkey'),
        UniqueConstraint('email', name='profiles_email_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255))
    password: Mapped[str] = mapped_column(String(255))
    full_name: Mapped[str] = mapped_column(Text, default='', server_default='')
    language: Mapped[str] = mapped_column(Text, default=LanguageEnum.EN.value, server_default=LanguageEnum.EN.value)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False, server_default='false')
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default='true')
    zoom_account_id: Mapped[Optional[str]] = mapped_column(Text)
    zoom_client_id: Mapped[Optional[str]] = mapped_column(Text)
    zoom_client_secret: Mapped[Optional[str]] = mapped_column(Text)
    whatsapp_phone_number_id: Mapped[Optional[str]] = mapped_column(Text)
    whatsapp_token: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow, server_default=func.now())

    @property
    def has_zoom_credentials(self) -> bool:
        return bool(self.zoom_account_id and self.zoom_client_id and self.zoom_client_secret)

    @property
    def has_whatsapp_credentials(self) -> bool:
        return bool(self.whatsapp_phone_number_id and self.whatsapp_token)


class Students(Base):
    __tablename__ = 'students'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='students_pkey'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(Text)
    last_name: Mapped[str] = mapped_column(Text)
    country: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    phone_e164: Mapped[Optional[str]] = mapped_column(Text)
    price_per_hour: Mapped[decimal.Decimal] = mapped_column(Numeric(10, 2), default=decimal.Decimal('0'), server_default='0')
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default='true')
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow, server_default=func.now())

    sessions: Mapped[list['Sessions']] = relationship(
        'Sessions',
        back_populates='student',
        cascade='all, delete-orphan',
        passive_deletes=True
    )
    ledger_entries: Mapped[list['LedgerEntries']] = relationship(
        'LedgerEntries',
        back_populates='student',
        cascade='all, delete-orphan',
        passive_deletes=True
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Sessions(Base):
    __tablename__ = 'sessions'
    __table_args__ = (
        CheckConstraint('scheduled_end_at > scheduled_start_at', name='sessions_valid_window'),
        ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE', name='sessions_student_id_fkey'),
        ForeignKeyConstraint(['created_by'], ['profiles.id'], ondelete='SET NULL', name='sessions_created_by_fkey'),
        PrimaryKeyConstraint('id', name='sessions_pkey'),
        Index('idx_sessions_scheduled_start_at', 'scheduled_start_at')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    status: Mapped[str] = mapped_column(
        Enum(*SessionStatusEnum.get_all_names(), name='session_status'),
        default=SessionStatusEnum.SCHEDULED.value,
        server_default=SessionStatusEnum.SCHEDULED.value
    )
    scheduled_start_at: Mapped[datetime.datetime] = mapped_column(DateTime(True))
    scheduled_end_at: Mapped[datetime.datetime] = mapped_column(DateTime(True))
    actual_start_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True))
    actual_end_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True))
    zoom_meeting_id: Mapped[Optional[str]] = mapped_column(Text)
    zoom_join_url: Mapped[Optional[str]] = mapped_column(Text)
    zoom_start_url: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    whatsapp_reminder_options: Mapped[str] = mapped_column(
        Text,
        default=WhatsAppReminderOptionEnum.NONE.value,
        server_default=WhatsAppReminderOptionEnum.NONE.value
    )
    whatsapp_notification_status: Mapped[str] = mapped_column(
        Enum(*WhatsAppNotificationStatusEnum.get_all_names(), name='whatsapp_reminder_status'),
        default=WhatsAppNotificationStatusEnum.NONE.value,
        server_default=WhatsAppNotificationStatusEnum.NONE.value
    )
    whatsapp_last_error: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow, server_default=func.now())

    student: Mapped['Students'] = relationship('Students', back_populates='sessions')
    creator: Mapped[Optional['Profiles']] = relationship('Profiles')
    reminder_jobs: Mapped[list['ReminderJobs']] = relationship(
        'ReminderJobs',
        back_populates='session',
        cascade='all, delete-orphan',
        passive_deletes=True
    )

    @property
    def student_name(self) -> str:
        return self.student.full_name if self.student else ''


class LedgerEntries(Base):
    __tablename__ = 'ledger_entries'
    __table_args__ = (
        ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE', name='ledger_entries_student_id_fkey'),
        ForeignKeyConstraint(['session_id'], ['sessions.id'], ondelete='SET NULL', name='ledger_entries_session_id_fkey'),
        ForeignKeyConstraint(['created_by'], ['profiles.id'], ondelete='SET NULL', name='ledger_entries_created_by_fkey'),
        PrimaryKeyConstraint('id', name='ledger_entries_pkey'),
        # One derived charge per completed session.
        UniqueConstraint('session_id', name='ledger_entries_session_id_key'),
        Index('idx_ledger_entries_student_id', 'student_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    type: Mapped[str] = mapped_column(Enum(*LedgerEntryTypeEnum.get_all_names(), name='ledger_entry_type'))
    amount: Mapped[decimal.Decimal] = mapped_column(Numeric(10, 2))
    reference: Mapped[Optional[str]] = mapped_column(Text)
    receipt_url: Mapped[Optional[str]] = mapped_column(Text)
    session_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, server_default=func.now())

    student: Mapped['Students'] = relationship('Students', back_populates='ledger_entries')

    @property
    def student_name(self) -> str:
        return self.student.full_name if self.student else ''


class ReminderJobs(Base):
    __tablename__ = 'reminder_jobs'
    __table_args__ = (
        ForeignKeyConstraint(['session_id'], ['sessions.id'], ondelete='CASCADE', name='reminder_jobs_session_id_fkey'),
        PrimaryKeyConstraint('id', name='reminder_jobs_pkey'),
        Index('idx_reminder_jobs_scheduled_for', 'scheduled_for')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    scheduled_for: Mapped[datetime.datetime] = mapped_column(DateTime(True))
    status: Mapped[str] = mapped_column(
        Enum(*ReminderStatusEnum.get_all_names(), name='reminder_status'),
        default=ReminderStatusEnum.PENDING.value,
        server_default=ReminderStatusEnum.PENDING.value
    )
    channel: Mapped[str] = mapped_column(
        Text,
        default=ReminderChannelEnum.WHATSAPP.value,
        server_default=ReminderChannelEnum.WHATSAPP.value
    )
    last_error: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow, onupdate=utcnow, server_default=func.now())

    session: Mapped['Sessions'] = relationship('Sessions', back_populates='reminder_jobs')
