# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Reporting domain package.

This package provides:
- ReportService: dashboard, list reports and consolidated exports
- Exporters rendering results as XML, CSV, JSON or PDF
"""

from src.domains.reporting.exporters import (
    CONTENT_TYPES,
    render_csv,
    render_json,
    render_pdf,
    render_xml,
)
from src.domains.reporting.service import (
    EXPORT_FORMATS,
    ReportService,
    ReportServiceError,
    UnsupportedFormatError,
)

__all__ = [
    "ReportService",
    "ReportServiceError",
    "UnsupportedFormatError",
    "EXPORT_FORMATS",
    "CONTENT_TYPES",
    "render_xml",
    "render_csv",
    "render_json",
    "render_pdf",
]
