"""Tests for the email and license extractors."""

from __future__ import annotations

from backend.extract.emails import extract_emails
from backend.extract.licenses import (
    License,
    extract_licenses,
    format_licenses,
    merge_licenses,
    parse_license_blocks,
)


class TestExtractEmails:
    def test_text_and_mailto(self) -> None:
        emails = extract_emails(
            "Write to Info@AcmePlumbing.com for service.",
            links=["mailto:sales@acmeplumbing.com?subject=Hi", "https://acme.test/"],
        )
        assert emails == ["info@acmeplumbing.com", "sales@acmeplumbing.com"]

    def test_obfuscated_address(self) -> None:
        assert extract_emails("office [at] acme (dot) com") == ["office@acme.com"]

    def test_junk_filtered(self) -> None:
        text = (
            "a1b2@sentry.io logo@2x.png you@domain.com 1234@sentry-next.wixpress.com "
            "real@acme.com"
        )
        assert extract_emails(text) == ["real@acme.com"]

    def test_blocklist_matches_whole_domain_only(self) -> None:
        text = "Email info@mydomain.com, sales@example.com or ops@notsentry.io"
        assert extract_emails(text) == [
            "info@mydomain.com",
            "sales@example.com",
            "ops@notsentry.io",
        ]

    def test_multiple_mailto_recipients_deduplicated(self) -> None:
        emails = extract_emails(
            "info@acme.com",
            links=["mailto:info@acme.com,jobs@acme.com", "MAILTO:jobs@acme.com"],
        )
        assert emails == ["info@acme.com", "jobs@acme.com"]

    def test_html_entities(self) -> None:
        assert extract_emails("info&#64;acme.com") == ["info@acme.com"]


class TestExtractLicenses:
    def test_common_label_forms(self) -> None:
        text = "Licensed plumber. MA License #PL-12345. Lic. No. 987654. License Number: HIC 170000"
        numbers = [lic.number for lic in extract_licenses(text)]
        assert numbers == ["PL-12345", "987654"]

    def test_identifier_needs_digit(self) -> None:
        assert extract_licenses("See our License Agreement and Licence terms.") == []

    def test_kind_captured(self) -> None:
        [lic] = extract_licenses("Master Plumber License #MP1234")
        assert lic.kind == "Master Plumber License"

    def test_duplicates_collapsed(self) -> None:
        assert len(extract_licenses("License #A123 ... license # a123")) == 1


class TestLicenseBlocks:
    _BLOCKS = (
        "License Number: 12345\nIssuing Authority: Massachusetts\nLicense Type: Plumber\n"
        "Status: Active\nExpiration Date: 2026-01-01\n\n"
        "License Number: None\nIssuing Authority: Somewhere"
    )

    def test_parse_skips_blocks_without_number(self) -> None:
        [lic] = parse_license_blocks(self._BLOCKS)
        assert lic == License("12345", "Massachusetts", "Plumber", "Active", "2026-01-01")

    def test_format_fills_missing_parts(self) -> None:
        assert format_licenses([License("PL-1")]) == (
            "License Number: PL-1\nIssuing Authority: None\nLicense Type: None\n"
            "Status: None\nExpiration Date: None"
        )

    def test_format_empty(self) -> None:
        assert format_licenses([]) == "None"
        assert parse_license_blocks("None") == []

    def test_merge_keeps_first_per_number(self) -> None:
        merged = merge_licenses(
            [License("PL-1", authority="MA")],
            [License("pl1"), License("HIC-2")],
        )
        assert [lic.number for lic in merged] == ["PL-1", "HIC-2"]
        assert merged[0].authority == "MA"
