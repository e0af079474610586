# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""LifeSure insurance platform backend.

The package centres on the application and claim lifecycle: policy
snapshots taken at submission, agent assignment, approval side effects on
the policy purchase counter, premium reconciliation against the payment
gateway, and one-claim-per-customer-per-policy enforcement.
"""

__version__ = "1.0.0"
