"""Enumerations shared by models and schemas."""

from enum import Enum


class UserType(str, Enum):
    VENDOR = "VENDOR"
    CLIENT = "CLIENT"
    DRIVER = "DRIVER"
    ADMIN = "ADMIN"
    HELPDESK = "HELPDESK"
    SUPER_ADMIN = "SUPER_ADMIN"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    DELETED = "DELETED"


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    INTERVIEWING = "INTERVIEWING"


class OrderStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ASSIGNED = "ASSIGNED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class DriverStatus(str, Enum):
    ASSIGNED = "ASSIGNED"
    ARRIVED_AT_VENDOR = "ARRIVED_AT_VENDOR"
    EN_ROUTE_TO_CLIENT = "EN_ROUTE_TO_CLIENT"
    ARRIVED_TO_CLIENT = "ARRIVED_TO_CLIENT"
    COMPLETED = "COMPLETED"


class CateringNeedHost(str, Enum):
    YES = "YES"
    NO = "NO"


class VehicleType(str, Enum):
    CAR = "CAR"
    VAN = "VAN"
    TRUCK = "TRUCK"


class AuditAction(str, Enum):
    SOFT_DELETE = "SOFT_DELETE"
    RESTORE = "RESTORE"
    PERMANENT_DELETE = "PERMANENT_DELETE"
    MANUAL_CLEANUP_INITIATED = "MANUAL_CLEANUP_INITIATED"
    MANUAL_CLEANUP_COMPLETED = "MANUAL_CLEANUP_COMPLETED"
    MANUAL_MONITORING_CHECK = "MANUAL_MONITORING_CHECK"
    MANUAL_MONITORING_CHECK_COMPLETED = "MANUAL_MONITORING_CHECK_COMPLETED"


# Order states that block a user's soft delete
ACTIVE_ORDER_STATUSES = (OrderStatus.ACTIVE, OrderStatus.ASSIGNED)

# Order states that cannot be left once reached
TERMINAL_ORDER_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)
