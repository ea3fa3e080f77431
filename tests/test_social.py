"""Tests for social-profile URL extraction."""

from __future__ import annotations

import pytest

from backend.extract.social import canonical_social_url, extract_social, platform_for


class TestCanonicalSocialUrl:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("https://www.facebook.com/acme/", "https://facebook.com/acme"),
            ("http://Instagram.com/acme#feed", "https://instagram.com/acme"),
            ("https://www.youtube.com/watch?v=abc", "https://youtube.com/watch?v=abc"),
            ("https://facebook.com", "https://facebook.com"),
        ],
    )
    def test_canonicalised(self, raw, expected) -> None:
        assert canonical_social_url(raw) == expected

    @pytest.mark.parametrize("raw", ["/about", "mailto:a@b.com", "", "javascript:void(0)"])
    def test_not_absolute_http(self, raw) -> None:
        assert canonical_social_url(raw) is None


class TestPlatformFor:
    def test_host_suffix_match(self) -> None:
        assert platform_for("https://m.facebook.com/acme").name == "Facebook"
        assert platform_for("https://x.com/acme").name == "X"

    def test_lookalike_host_rejected(self) -> None:
        assert platform_for("https://notfacebook.com/acme") is None

    def test_bare_root_rejected(self) -> None:
        assert platform_for("https://facebook.com") is None

    @pytest.mark.parametrize(
        "url",
        [
            "https://facebook.com/sharer/sharer.php?u=x",
            "https://twitter.com/intent/tweet?text=hi",
            "https://linkedin.com/shareArticle?mini=true",
        ],
    )
    def test_share_links_rejected(self, url) -> None:
        assert platform_for(url) is None


class TestExtractSocial:
    def test_one_line_per_platform(self) -> None:
        links = [
            "https://www.facebook.com/examplebiz/",
            "https://facebook.com/examplebiz-other",
            "https://instagram.com/examplebiz",
            "https://example.com/about",
        ]
        assert extract_social(links) == [
            "Facebook: https://facebook.com/examplebiz",
            "Instagram: https://instagram.com/examplebiz",
        ]

    def test_structured_profiles_first(self) -> None:
        lines = extract_social(
            ["https://facebook.com/from-anchor"],
            related_profiles=["https://www.facebook.com/from-jsonld"],
        )
        assert lines == ["Facebook: https://facebook.com/from-jsonld"]

    def test_share_and_root_links_skipped(self) -> None:
        links = [
            "https://www.facebook.com/",
            "https://facebook.com/sharer.php?u=https://example.com",
            "https://twitter.com/intent/tweet",
            "https://twitter.com/examplebiz",
        ]
        assert extract_social(links) == ["X: https://twitter.com/examplebiz"]

    def test_nothing_found(self) -> None:
        assert extract_social(["https://example.com/contact"]) == []
