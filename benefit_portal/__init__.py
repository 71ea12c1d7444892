"""Top-level benefit_portal package.

Sub-packages
------------
benefit_portal.backend
    FastAPI server (api/), domain logic (core/), schemas/, services/, cli/
"""

from __future__ import annotations

__version__ = "0.1.0"
