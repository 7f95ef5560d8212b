# app/models/enums.py
"""Status and type vocabularies shared by models, schemas and the booking engine."""

from enum import Enum


class SpaceType(str, Enum):
    REGULAR = "regular"
    COMPACT = "compact"
    DISABLED = "disabled"
    ELECTRIC = "electric"


class SpaceStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    MAINTENANCE = "maintenance"   # staff-only, never overwritten by bookings


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment state as seen on the booking."""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentRecordStatus(str, Enum):
    """State of a single charge attempt in the payments table."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CARD = "card"
    PAYPAL = "paypal"
    WALLET = "wallet"
    CASH = "cash"


class NotificationType(str, Enum):
    BOOKING = "booking"
    PAYMENT = "payment"
    REMINDER = "reminder"
    SYSTEM = "system"


class Role(str, Enum):
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"
