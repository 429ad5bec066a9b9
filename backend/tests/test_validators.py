"""
Tests for input validators: slugs, media URLs and LIKE escaping.
"""

import pytest

from storefront_shared.utils.validators import (
    escape_like_pattern,
    slugify,
    validate_media_url,
    validate_slug,
)


class TestSlugify:

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Air Max", "air-max"),
            ("  Nike  Air (Max)! ", "nike-air-max"),
            ("T-Shirts & Tops", "t-shirts-tops"),
            ("Sale 2024", "sale-2024"),
            ("---", ""),
            ("", ""),
            (None, ""),
        ],
    )
    def test_slugify(self, name, expected):
        assert slugify(name) == expected

    def test_validate_slug_accepts_canonical(self):
        assert validate_slug(" air-max ") == "air-max"

    @pytest.mark.parametrize("slug", ["", "   ", "Air-Max", "air--max", "air_max", "-air"])
    def test_validate_slug_rejects(self, slug):
        with pytest.raises(ValueError):
            validate_slug(slug)


class TestMediaUrl:

    def test_accepts_public_https(self):
        assert validate_media_url(" https://cdn.shop.test/a.png ") == "https://cdn.shop.test/a.png"

    def test_empty_is_none(self):
        assert validate_media_url("") is None
        assert validate_media_url(None) is None

    @pytest.mark.parametrize(
        "url",
        [
            "javascript:alert(1)",
            "data:image/png;base64,AAAA",
            "ftp://cdn.shop.test/a.png",
            "http://localhost:8000/a.png",
            "http://10.0.0.5/a.png",
            "http://169.254.169.254/latest/meta-data",
            "https:///nohost",
        ],
    )
    def test_rejects_unsafe(self, url):
        with pytest.raises(ValueError):
            validate_media_url(url)

    def test_rejects_long_url(self):
        with pytest.raises(ValueError):
            validate_media_url("https://cdn.shop.test/" + "a" * 2048)


class TestEscapeLike:

    def test_wildcards_escaped(self):
        assert escape_like_pattern("50%_off\\") == "50\\%\\_off\\\\"

    def test_plain_text_unchanged(self):
        assert escape_like_pattern("nike") == "nike"
