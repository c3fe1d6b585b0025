# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for external resources.

This package contains:
- Database connections, models and the upsert primitive (PostgreSQL/SQLite)
- Content-addressed file storage for uploads and consolidated exports
"""
