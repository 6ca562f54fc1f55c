"""Enumerated column values shared by models, schemas and services."""

from enum import Enum


class RequestStatus(str, Enum):
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"
    SPAM = "SPAM"


class Currency(str, Enum):
    KZT = "KZT"
    USD = "USD"
    RUB = "RUB"


class PreferredContact(str, Enum):
    PHONE = "PHONE"
    EMAIL = "EMAIL"
    ANY = "ANY"


class LawyerStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LawyerType(str, Enum):
    ADVOCATE = "ADVOCATE"
    CONSULTANT = "CONSULTANT"


class AdminRole(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    MODERATOR = "MODERATOR"
