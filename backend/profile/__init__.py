"""Business-profile assembly package.

Public API::

    from backend.profile import build_profile
    record = build_profile("https://example.com")
"""

from backend.profile.models import ABSENT, BusinessProfileRecord
from backend.profile.service import build_profile

__all__ = ["build_profile", "BusinessProfileRecord", "ABSENT"]
