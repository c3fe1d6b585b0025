# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database migrations package.

This package contains the Alembic environment, the schema revisions under
versions/, and a programmatic runner used at startup and in tests.
"""
