"""The business-profile record returned by a profile run.

Every field is a formatted string.  A field with nothing to report holds
the absence marker :data:`ABSENT` rather than an empty string or ``None``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

ABSENT = "None"

# snake_case attribute -> camelCase key on the wire
_WIRE_KEYS = {
    "url": "url",
    "time_taken": "timeTaken",
    "description": "description",
    "client_base": "clientBase",
    "owner_demographic": "ownerDemographic",
    "products_and_services": "productsAndServices",
    "hours_of_operation": "hoursOfOperation",
    "addresses": "addresses",
    "phone_numbers": "phoneNumbers",
    "email_addresses": "emailAddresses",
    "social_media_urls": "socialMediaUrls",
    "license_numbers": "licenseNumbers",
    "methods_of_payment": "methodsOfPayment",
    "bbb_seal": "bbbSeal",
    "bbb_seal_hint": "bbbSealHint",
    "service_area": "serviceArea",
    "refund_and_exchange_policy": "refundAndExchangePolicy",
    "lead_form": "leadForm",
    "lead_form_title": "leadFormTitle",
    "lead_form_url": "leadFormUrl",
}


@dataclass(frozen=True)
class BusinessProfileRecord:
    url: str = ABSENT
    time_taken: str = ABSENT

    # Judgment fields, filled in by the summariser
    description: str = ABSENT
    client_base: str = ABSENT
    owner_demographic: str = ABSENT
    products_and_services: str = ABSENT
    methods_of_payment: str = ABSENT
    service_area: str = ABSENT
    refund_and_exchange_policy: str = ABSENT

    # Extracted fields
    hours_of_operation: str = ABSENT
    addresses: str = ABSENT
    phone_numbers: str = ABSENT
    email_addresses: str = ABSENT
    social_media_urls: str = ABSENT
    license_numbers: str = ABSENT
    bbb_seal: str = ABSENT
    bbb_seal_hint: str = ABSENT
    lead_form: str = ABSENT
    lead_form_title: str = ABSENT
    lead_form_url: str = ABSENT

    def with_fields(self, **changes: Any) -> "BusinessProfileRecord":
        """Copy with *changes* applied; falsy values become :data:`ABSENT`."""
        return replace(self, **{k: (v or ABSENT) for k, v in changes.items()})

    def to_dict(self) -> dict[str, str]:
        """Flat camelCase mapping, the shape the HTTP layer returns."""
        data = asdict(self)
        return {_WIRE_KEYS[name]: data[name] for name in _WIRE_KEYS}


def join_lines(values: list[str], separator: str = "\n") -> str:
    """Join non-empty *values*, or return :data:`ABSENT` when there are none."""
    kept = [v for v in values if v]
    return separator.join(kept) if kept else ABSENT


def format_elapsed(seconds: float) -> str:
    """``75.2`` -> ``"1 minute 15 seconds"``."""
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    return (
        f"{minutes} minute{'' if minutes == 1 else 's'} "
        f"{secs} second{'' if secs == 1 else 's'}"
    )
