# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Read-only dashboard views."""

from pydantic import Field

from .application import Application
from .base import BaseModelConfig


class AgentOverview(BaseModelConfig):
    """One agent's workload and this month's activity."""

    agent_email: str
    status_counts: dict[str, int] = Field(default_factory=dict)
    assigned_this_month: int = 0
    claims_resolved_this_month: int = 0
    recent_applications: list[Application] = Field(default_factory=list)
