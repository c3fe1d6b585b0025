"""Gradebook Import backend.

Academic enrollment data ingestion from XML with on-demand performance
metrics (weighted GPA, approval rates, dispersion statistics) and
consolidated report exports.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
