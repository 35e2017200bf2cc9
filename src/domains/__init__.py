# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the LearnSync SDK.

Domains:
    content: Content details and learner content markers.
    course: Course context and remote content state.
    framework: Channel lookup and the active channel.
    profile: Managed profiles and profile import validation.
    summarizer: Learning progress tracking from telemetry.
    telemetry: Telemetry event model.
"""
