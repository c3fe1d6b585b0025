# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the gradebook import backend.

This package contains domain services that encapsulate business logic.
Each domain module provides services that orchestrate database access
and artifact storage.

Domains:
    importing: XML validation, parsing and transactional import.
    metrics: GPA, pass/fail and grade statistics.
    reporting: Dashboard, list reports and consolidated exports.
    student: Student directory with metrics.
"""
