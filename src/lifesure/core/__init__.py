# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Core infrastructure components for the LifeSure backend."""

from .config import Settings, get_settings
from .document_store import Collection, DocumentStore, DuplicateKeyError
from .errors import ErrorKind, ServiceError
from .result_types import Err, Ok, Result

__all__ = [
    "Settings",
    "get_settings",
    "Collection",
    "DocumentStore",
    "DuplicateKeyError",
    "ErrorKind",
    "ServiceError",
    "Err",
    "Ok",
    "Result",
]
