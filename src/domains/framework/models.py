# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data models for channels and frameworks."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.infrastructure.cache import CachedItemRequestSourceFrom


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )


class Framework(_CamelModel):
    """A categorisation framework offered by a channel.

    Attributes:
        identifier: Framework id.
        name: Display name.
        index: Display position within the channel, None when unordered.
    """

    identifier: str
    name: str = ""
    index: int | None = None


class Channel(_CamelModel):
    """Configuration record of a channel (organisation).

    Attributes:
        identifier: Channel id.
        name: Display name.
        frameworks: Frameworks offered by the channel, sorted by index.
        default_framework: Id of the framework used when none is chosen.
    """

    identifier: str
    name: str = ""
    code: str | None = None
    frameworks: list[Framework] | None = None
    default_framework: str | None = None


class ChannelDetailsRequest(BaseModel):
    """Look up a channel.

    Attributes:
        channel_id: Channel id.
        from_: SERVER forces a platform read, CACHE prefers the cached or
            bundled copy.
    """

    model_config = ConfigDict(populate_by_name=True)

    channel_id: str
    from_: CachedItemRequestSourceFrom = Field(
        default=CachedItemRequestSourceFrom.CACHE, alias="from"
    )
