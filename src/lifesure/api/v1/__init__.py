# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""API router aggregation.

This module combines all routers into a single router mounted under
``/api`` on the main FastAPI application.
"""

from fastapi import APIRouter

from .applications import router as applications_router
from .claims import router as claims_router
from .payments import router as payments_router
from .policies import router as policies_router
from .reports import router as reports_router
from .users import router as users_router

router = APIRouter(prefix="/api")

router.include_router(users_router, tags=["users"])
router.include_router(policies_router, tags=["policies"])
router.include_router(applications_router, tags=["applications"])
router.include_router(payments_router, tags=["payments"])
router.include_router(claims_router, tags=["claims"])
router.include_router(reports_router, tags=["reports"])

__all__ = ["router"]
