"""Field extractors and the JSON-LD harvester.

Every extractor is a pure function over the assembled crawl (corpus, link
set, structured metadata); none touches shared state.
"""

from backend.extract.addresses import extract_addresses
from backend.extract.emails import extract_emails
from backend.extract.hours import extract_hours, resolve_hours
from backend.extract.lead_form import LeadForm, detect_lead_form
from backend.extract.licenses import extract_licenses
from backend.extract.phones import extract_phones
from backend.extract.seal import detect_seal
from backend.extract.social import extract_social
from backend.extract.structured import StructuredMetadata, harvest

__all__ = [
    "harvest",
    "StructuredMetadata",
    "extract_addresses",
    "extract_emails",
    "extract_hours",
    "resolve_hours",
    "extract_licenses",
    "extract_phones",
    "extract_social",
    "detect_seal",
    "detect_lead_form",
    "LeadForm",
]
