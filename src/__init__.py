"""LearnSync SDK.

Client-side SDK layer for an educational content platform: channel lookup,
profile management and learning-progress summarization over a remote API,
a local store, a key-value cache and an in-process event bus.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
