"""Tests for merge & normalise, including the end-to-end fixture site.

The fixture test drives the real fetcher and walker through ``respx`` and
then runs every extractor, so it covers the whole engine below the
summariser.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from backend.config import settings
from backend.extract.seal import SEAL_NOT_FOUND
from backend.extract.structured import PostalAddress, StructuredMetadata, harvest
from backend.profile.merge import (
    Candidate,
    Provenance,
    merge_addresses,
    merge_phones,
    merge_profile,
    prioritise,
    tag,
)
from backend.profile.models import ABSENT, BusinessProfileRecord
from backend.scraper.models import CrawlResult, CrawlTarget, FetchedPage
from backend.scraper.walker import walk

ROOT = "https://examplebiz.test/"

_FIXTURE_HTML = """\
<!DOCTYPE html>
<html>
<head>
  <title>Example Biz</title>
  <script type="application/ld+json">
  {
    "@context": "https://schema.org",
    "@type": "LocalBusiness",
    "name": "Example Biz",
    "address": {
      "@type": "PostalAddress",
      "streetAddress": "10 Main St",
      "addressLocality": "Boston",
      "addressRegion": "MA",
      "postalCode": "02108"
    }
  }
  </script>
</head>
<body>
  <main>
    <h1>Example Biz</h1>
    <p>Residential plumbing repairs and installations for homeowners.</p>
    <p>tel: (617) 555-0101</p>
    <p>10 Main St, Boston, MA 02108</p>
  </main>
  <footer>
    <a href="https://facebook.com/examplebiz">Facebook</a>
    <a href="https://www.facebook.com/sharer/sharer.php?u=https://examplebiz.test/">Share</a>
  </footer>
</body>
</html>
"""


@pytest.fixture(autouse=True)
def _merge_settings(monkeypatch):
    monkeypatch.setattr(settings, "seal_not_found_hint", "alert")
    monkeypatch.setattr(settings, "crawl_fallback_policy", "thin")


def _crawl(text: str = "", links=None, markup: str = "") -> CrawlResult:
    page = FetchedPage(url=ROOT, raw_markup=markup, visible_text=text, outbound_links=links or [])
    return CrawlResult(target=CrawlTarget.parse(ROOT), pages=[page])


# ---------------------------------------------------------------------------
# prioritise
# ---------------------------------------------------------------------------

class TestPrioritise:
    def test_structured_beats_pattern_regardless_of_order(self) -> None:
        candidates = [
            Candidate("b-pattern", Provenance.PATTERN, 0),
            Candidate("a-structured", Provenance.STRUCTURED, 5),
        ]
        assert prioritise(candidates) == ["a-structured", "b-pattern"]

    def test_discovery_order_within_provenance(self) -> None:
        candidates = tag(["x", "y", "z"], Provenance.PATTERN)
        assert prioritise(reversed(candidates)) == ["x", "y", "z"]

    def test_dedupe_by_key_keeps_higher_priority(self) -> None:
        candidates = tag(["10 MAIN ST"], Provenance.STRUCTURED) + tag(["10 Main St"], Provenance.PATTERN)
        assert prioritise(candidates, key=str.lower) == ["10 MAIN ST"]


# ---------------------------------------------------------------------------
# Per-field merges
# ---------------------------------------------------------------------------

class TestFieldMerges:
    def test_phones_structured_first_and_deduplicated(self) -> None:
        meta = StructuredMetadata(telephones=["+1-508-555-0199", "617.555.0101"])
        corpus = "Call (617) 555-0101 or (781) 555-0142"
        assert merge_phones(meta, corpus) == [
            "(508) 555-0199",
            "(617) 555-0101",
            "(781) 555-0142",
        ]

    def test_structured_address_preferred_over_text_match(self) -> None:
        meta = StructuredMetadata(
            addresses=[PostalAddress("10 Main Street", "boston", "MA", "02108", "US")]
        )
        corpus = "Find us: 10 Main St, Boston, MA 02108. Branch: 5 Elm Rd, Salem, NH 03079"
        assert merge_addresses(meta, corpus) == [
            "10 Main Street\nBoston, MA 02108\nUSA",
            "5 Elm Rd\nSalem, NH 03079\nUSA",
        ]

    def test_structured_address_text_parsed(self) -> None:
        meta = StructuredMetadata(address_texts=["10 Main St, Boston, MA 02108"])
        assert merge_addresses(meta, "") == ["10 Main St\nBoston, MA 02108\nUSA"]


# ---------------------------------------------------------------------------
# merge_profile
# ---------------------------------------------------------------------------

class TestMergeProfile:
    def test_empty_site_gives_absence_markers(self) -> None:
        record = merge_profile(_crawl(), StructuredMetadata())

        assert record.url == ROOT
        assert record.phone_numbers == ABSENT
        assert record.addresses == ABSENT
        assert record.email_addresses == ABSENT
        assert record.social_media_urls == ABSENT
        assert record.hours_of_operation == ABSENT
        assert record.license_numbers == ABSENT
        assert record.lead_form == ABSENT
        assert record.lead_form_url == ABSENT
        assert record.bbb_seal == SEAL_NOT_FOUND
        assert record.bbb_seal_hint == "alert"
        assert record.description == ABSENT

    def test_seal_found_clears_hint(self) -> None:
        record = merge_profile(_crawl("We are BBB Accredited."), StructuredMetadata())
        assert record.bbb_seal.startswith("FOUND")
        assert record.bbb_seal_hint == ABSENT

    def test_hint_can_be_disabled(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "seal_not_found_hint", "")
        assert merge_profile(_crawl(), StructuredMetadata()).bbb_seal_hint == ABSENT

    def test_fields_joined(self) -> None:
        text = (
            "Email info@acme.com or jobs@acme.com\n"
            "Mon-Fri 8am-5pm, Sat-Sun closed\n"
            "Contractor License #CS-98765"
        )
        record = merge_profile(_crawl(text), StructuredMetadata())

        assert record.email_addresses == "info@acme.com\njobs@acme.com"
        assert record.hours_of_operation.splitlines()[0] == "Monday: 08:00 AM - 05:00 PM"
        assert record.hours_of_operation.splitlines()[-1] == "Sunday: Closed"
        assert record.license_numbers.startswith("License Number: CS-98765\n")

    def test_lead_form_fields(self) -> None:
        markup = '<a href="/book/table">Book a table</a>'
        form_page = FetchedPage(
            url=ROOT + "book/table",
            raw_markup='<form><input name="guests"></form>',
            visible_text="",
        )
        crawl = _crawl(markup=markup)
        crawl.pages.append(form_page)

        record = merge_profile(crawl, StructuredMetadata())

        assert record.lead_form_title == "Book a table"
        assert record.lead_form_url == ROOT + "book/table"
        assert record.lead_form == (
            f"Lead Form Title: Book a table\nLead Form URL: {ROOT}book/table"
        )


# ---------------------------------------------------------------------------
# End-to-end fixture
# ---------------------------------------------------------------------------

class TestFixtureSite:
    def test_merged_record(self) -> None:
        with respx.mock(assert_all_called=False) as mock:
            mock.get(ROOT).mock(return_value=httpx.Response(200, html=_FIXTURE_HTML))
            mock.route(host="examplebiz.test").mock(return_value=httpx.Response(404))
            crawl = walk(CrawlTarget.parse(ROOT), max_pages=5, max_depth=1)

        record = merge_profile(crawl, harvest(crawl.structured_blocks))

        assert isinstance(record, BusinessProfileRecord)
        assert record.phone_numbers == "(617) 555-0101"
        addresses = record.addresses.split("\n\n")
        assert len(addresses) == 1
        assert addresses[0].splitlines()[1] == "Boston, MA 02108"
        assert addresses[0].splitlines()[0] == "10 Main St"
        assert record.social_media_urls == "Facebook: https://facebook.com/examplebiz"
