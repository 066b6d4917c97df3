"""
core/models.py — Single source of truth for the data models shared by the
config, database and guard modules.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseModel):
    """Process settings, built once by ``core.config.get_settings``."""
    model_config = ConfigDict(frozen=True)

    mongodb_uri: str = ""
    mongodb_timeout_ms: int = 10_000

    @property
    def configured(self) -> bool:
        return bool(self.mongodb_uri)


# ---------------------------------------------------------------------------
# Connection lifecycle
# ---------------------------------------------------------------------------

class ConnectionState(str, Enum):
    """Where a ConnectionManager's cache slot currently stands."""
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    READY = "ready"
    UNAVAILABLE = "unavailable"


class DatabaseHealth(BaseModel):
    """Output of ``ConnectionManager.health``."""
    configured: bool
    state: ConnectionState
    database: str
    ok: bool = False
    latency_ms: Optional[float] = None


# ---------------------------------------------------------------------------
# Caller-facing responses
# ---------------------------------------------------------------------------

class ServiceUnavailable(BaseModel):
    """Payload handlers return when no database handle is available."""
    status_code: int = 503
    error: str = "service_unavailable"
    message: str = "The service is temporarily unavailable. Please try again later."


# ---------------------------------------------------------------------------
# Portal collections
# ---------------------------------------------------------------------------

class Collections:
    """Collection names in the healthcare_system database."""
    USERS = "users"
    PATIENTS = "patients"
    DOCTORS = "doctors"
    PHARMACISTS = "pharmacists"
    ADMINS = "admins"
    APPOINTMENTS = "appointments"
    MEDICAL_RECORDS = "medical_records"
    PRESCRIPTIONS = "prescriptions"
    MEDICINES = "medicines"
    PAYMENTS = "payments"

    @classmethod
    def all(cls) -> list[str]:
        return [
            cls.USERS, cls.PATIENTS, cls.DOCTORS, cls.PHARMACISTS, cls.ADMINS,
            cls.APPOINTMENTS, cls.MEDICAL_RECORDS, cls.PRESCRIPTIONS,
            cls.MEDICINES, cls.PAYMENTS,
        ]
