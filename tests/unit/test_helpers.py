"""
Tests pour les fonctions utilitaires partagees.
"""

import pytest

from src.utils.helpers import (
    contains_any,
    mask_ip_address,
    name_key,
    normalize_accents,
    strip_invisible_chars,
)


class TestMaskIpAddress:
    @pytest.mark.parametrize(
        "address,expected",
        [
            ("192.168.1.42", "192.168.*.*"),
            ("2001:db8::1", "2001:db8:*"),
            ("localhost", "*"),
            (None, "unknown"),
            ("", "unknown"),
        ],
    )
    def test_mask(self, address, expected):
        assert mask_ip_address(address) == expected


class TestNameKey:
    def test_invisible_and_case(self):
        assert name_key("  Amélie\u200e ") == "amélie"
        assert name_key("AMÉLIE") == name_key("amélie")

    def test_empty(self):
        assert name_key(None) == ""

    def test_strip_invisible(self):
        assert strip_invisible_chars("\ufeffFilm\u200f") == "Film"


class TestContainsAny:
    def test_accent_and_case_insensitive(self):
        assert contains_any("Audio ESPAÑOL 5.1", ["espanol"])
        assert contains_any("Castellano", ["castellano", "spanish"])

    def test_no_match(self):
        assert not contains_any("English", ["spanish"])
        assert not contains_any(None, ["spanish"])
        assert contains_any("English", ["", "fr"]) is False

    def test_normalize_accents(self):
        assert normalize_accents("Español") == "Espanol"
