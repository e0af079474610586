"""Domain models package for the LifeSure backend.

This package exports the Pydantic models for policies, applications,
transactions, claims and users. All are immutable; stored documents and API
payloads use camelCase keys.
"""

from .application import (
    AgentAssignment,
    Application,
    ApplicationStatus,
    ApplicationSubmission,
    PaymentFrequency,
    PaymentState,
    PaymentStatus,
    StatusChange,
)
from .base import BaseModelConfig, DocumentModel, RequestModel
from .claim import Claim, ClaimCreate, ClaimResolution, ClaimStatus
from .policy import Policy, PolicyCreate, PolicySnapshot, PolicyUpdate
from .report import AgentOverview
from .transaction import (
    PaymentConfirmation,
    PaymentIntentRequest,
    PaymentReceipt,
    Transaction,
)
from .user import RoleUpdate, User, UserRegistration, UserRole

__all__ = [
    # Base models
    "BaseModelConfig",
    "DocumentModel",
    "RequestModel",
    # Policy models
    "Policy",
    "PolicyCreate",
    "PolicyUpdate",
    "PolicySnapshot",
    # Application models
    "Application",
    "ApplicationSubmission",
    "ApplicationStatus",
    "AgentAssignment",
    "StatusChange",
    "PaymentState",
    "PaymentStatus",
    "PaymentFrequency",
    # Payment models
    "Transaction",
    "PaymentIntentRequest",
    "PaymentConfirmation",
    "PaymentReceipt",
    # Claim models
    "Claim",
    "ClaimCreate",
    "ClaimResolution",
    "ClaimStatus",
    # Reporting models
    "AgentOverview",
    # User models
    "User",
    "UserRegistration",
    "RoleUpdate",
    "UserRole",
]
