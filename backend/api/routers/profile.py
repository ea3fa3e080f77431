"""Profile generation endpoint.

Routes
------
POST /generate    Body: {"url": "https://..."}    → build_profile
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from backend.errors import ProfileError
from backend.profile.service import build_profile

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class GenerateRequest(BaseModel):
    # Plain string: validation happens in CrawlTarget.parse so that bad
    # input gets the same 400 messages as the CLI.
    url: str = ""


class GenerateResponse(BaseModel):
    url: str
    timeTaken: str
    description: str
    clientBase: str
    ownerDemographic: str
    productsAndServices: str
    hoursOfOperation: str
    addresses: str
    phoneNumbers: str
    emailAddresses: str
    socialMediaUrls: str
    licenseNumbers: str
    methodsOfPayment: str
    bbbSeal: str
    bbbSealHint: str
    serviceArea: str
    refundAndExchangePolicy: str
    leadForm: str
    leadFormTitle: str
    leadFormUrl: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/generate", response_model=GenerateResponse)
def generate_endpoint(body: GenerateRequest) -> dict[str, str]:
    """Crawl the site, extract every field and return the profile record.

    Errors map onto status codes: 400 for a bad URL, 422 when the site
    yielded no usable content, and the summariser's own status otherwise.
    """
    try:
        record = build_profile(body.url)
    except ProfileError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    return record.to_dict()
