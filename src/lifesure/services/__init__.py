# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Business logic service layer."""

from ..core.result_types import Err, Ok, Result
from .application_service import ApplicationService
from .claim_service import ClaimService
from .payment_service import PaymentService
from .policy_catalog import PolicyCatalog
from .reporting_service import ReportingService
from .user_service import UserService

__all__ = [
    "Result",
    "Ok",
    "Err",
    "PolicyCatalog",
    "ApplicationService",
    "PaymentService",
    "ClaimService",
    "UserService",
    "ReportingService",
]
