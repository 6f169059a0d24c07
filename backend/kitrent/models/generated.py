from sqlalchemy import Column, Date, Enum, Float, ForeignKey, Index, Integer, Text, func, text

from sqlalchemy.orm import declarative_base, relationship

from .enums import BLOCKING_STATUSES, BookingSource, BookingStatus, ServiceCode

Base = declarative_base()
metadata = Base.metadata


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def _enum_column_type(enum_cls, name: str) -> Enum:
    # VARCHAR + lowercase values on every backend
    return Enum(
        enum_cls,
        name=name,
        values_callable=_enum_values,
        native_enum=False,
        validate_strings=True,
    )


# Rows covered by the one-kit-per-date-slot uniqueness rule
BLOCKING_KIT_PREDICATE = "kit_id IS NOT NULL AND status IN ({})".format(
    ", ".join(f"'{status.value}'" for status in sorted(BLOCKING_STATUSES, key=lambda s: s.value))
)


class TimeSlots(Base):
    __tablename__ = 'time_slots'

    code = Column(Text, nullable=False, unique=True)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    sort_order = Column(Integer, nullable=False, unique=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)

    bookings = relationship('Bookings', back_populates='time_slot')


class Kits(Base):
    __tablename__ = 'kits'

    number = Column(Integer, nullable=False, unique=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)

    bookings = relationship('Bookings', back_populates='kit')


class Services(Base):
    __tablename__ = 'services'

    code = Column(_enum_column_type(ServiceCode, 'service_code'), nullable=False, unique=True)
    title = Column(Text, nullable=False)
    price_rub = Column(Float, nullable=False, server_default=text('0'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    prepayment_rub = Column(Float)

    bookings = relationship('Bookings', back_populates='service')


class Addresses(Base):
    __tablename__ = 'addresses'

    client_ref = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    address_line = Column(Text, nullable=False)
    contact_name = Column(Text, nullable=False)
    contact_phone = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    bookings = relationship('Bookings', back_populates='address')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        Index(
            'uq_bookings_date_slot_kit',
            'scheduled_date', 'time_slot_id', 'kit_id',
            unique=True,
            sqlite_where=text(BLOCKING_KIT_PREDICATE),
            postgresql_where=text(BLOCKING_KIT_PREDICATE),
        ),
        Index('ix_bookings_scheduled_date', 'scheduled_date'),
        Index('ix_bookings_client_ref', 'client_ref'),
    )

    client_ref = Column(Text, nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    status = Column(
        _enum_column_type(BookingStatus, 'booking_status'),
        nullable=False,
        default=BookingStatus.NEW,
    )
    source = Column(
        _enum_column_type(BookingSource, 'booking_source'),
        nullable=False,
        default=BookingSource.TELEGRAM_MINIAPP,
    )
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(
        Text,
        nullable=False,
        server_default=text('CURRENT_TIMESTAMP'),
        onupdate=func.current_timestamp(),
    )
    id = Column(Integer, primary_key=True)
    address_id = Column(ForeignKey('addresses.id'))
    scheduled_date = Column(Date)  # null for unslotted service requests
    time_slot_id = Column(ForeignKey('time_slots.id'))
    kit_id = Column(ForeignKey('kits.id'))  # cleared when the booking is cancelled
    details = Column(Text)

    address = relationship('Addresses', back_populates='bookings')
    kit = relationship('Kits', back_populates='bookings')
    service = relationship('Services', back_populates='bookings')
    time_slot = relationship('TimeSlots', back_populates='bookings')
