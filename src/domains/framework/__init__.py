# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Framework domain package.

Provides channel lookup through the cached item store and the active
channel preference.
"""

from src.domains.framework.handler import GetChannelDetailsHandler, sort_frameworks
from src.domains.framework.models import Channel, ChannelDetailsRequest, Framework
from src.domains.framework.service import FrameworkService

__all__ = [
    "GetChannelDetailsHandler",
    "sort_frameworks",
    "Channel",
    "ChannelDetailsRequest",
    "Framework",
    "FrameworkService",
]
