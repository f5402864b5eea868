"""Application-state, eligibility and submission mapping core for the
dental care plan application wizards."""

from cdcp_core.config import CdcpConfig
from cdcp_core.exceptions import (
    CdcpError,
    ConfigurationError,
    DataIntegrityError,
    DomainError,
    PreconditionError,
    RedirectRequired,
)
from cdcp_core.repository import ApplicationStateRepository
from cdcp_core.results import FlowResult, FlowStatus
from cdcp_core.session import InMemorySession, SessionStore

__version__ = "0.1.0"

__all__ = [
    "CdcpConfig",
    "CdcpError",
    "ConfigurationError",
    "DataIntegrityError",
    "DomainError",
    "PreconditionError",
    "RedirectRequired",
    "ApplicationStateRepository",
    "FlowResult",
    "FlowStatus",
    "InMemorySession",
    "SessionStore",
]
