# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for external service integrations.

This package contains clients and adapters for:
- Remote platform API (httpx)
- Local store (SQLAlchemy async)
- Cache and key-value stores (Redis)
- Preference store
- In-process event bus
- Bundled asset files
"""
