"""
Tests politique de validation — texte, email, téléphone NZ, consentement, choix.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from leadpages.core.validation import (
    format_nz_phone, is_blank, validate_choice, validate_consent, validate_email,
    validate_phone, validate_text,
)


class TestText:
    def test_blank_required_fails(self):
        assert validate_text("", required=True) == "This field is required"
        assert validate_text("   ", required=True) == "This field is required"
        assert validate_text(None, required=True) == "This field is required"

    def test_blank_optional_passes(self):
        assert validate_text("", required=False) is None

    def test_custom_message(self):
        assert validate_text("", True, message="Pick one") == "Pick one"

    def test_max_length(self):
        assert validate_text("abcdef", max_length=5) == "Must be 5 characters or fewer"
        assert validate_text("abcde", max_length=5) is None

    def test_is_blank(self):
        assert is_blank(None) and is_blank(" \t") and not is_blank(0) and not is_blank(False)


class TestEmail:
    def test_missing_tld_fails(self):
        assert validate_email("a@b") == "Please enter a valid email address"

    def test_well_formed_passes(self):
        assert validate_email("a@b.co") is None
        assert validate_email("first.last+tag@mail.example.nz") is None

    def test_required_blank(self):
        assert validate_email("", required=True) == "Email is required"
        assert validate_email("", required=False) is None

    @pytest.mark.parametrize("value", ["plainaddress", "@b.co", "a@.co", "a b@c.co"])
    def test_malformed(self, value):
        assert validate_email(value) is not None


class TestPhone:
    @pytest.mark.parametrize("value", ["021 123 4567", "0211234567", "09 123 4567", "+64 21 123 4567", "027-123-4567"])
    def test_nz_numbers_pass(self, value):
        assert validate_phone(value) is None

    @pytest.mark.parametrize("value", ["12345", "+1 415 555 0100", "abc", "021"])
    def test_other_numbers_fail(self, value):
        assert validate_phone(value) == "Please enter a valid NZ phone number"

    def test_required_blank(self):
        assert validate_phone(" ", required=True) == "Phone number is required"


class TestConsent:
    def test_false_fails_when_required(self):
        assert validate_consent(False, required=True) == "You must agree to continue"

    def test_true_passes(self):
        assert validate_consent(True, required=True) is None

    def test_truthy_non_bool_fails(self):
        assert validate_consent("true", required=True) is not None
        assert validate_consent(1, required=True) is not None

    def test_optional_unchecked_passes(self):
        assert validate_consent(False, required=False) is None


class TestChoice:
    def test_declared_option_passes(self):
        assert validate_choice("owner", ["owner", "buyer"], required=True) is None

    def test_undeclared_option_fails(self):
        assert validate_choice("landlord", ["owner", "buyer"]) == "Please select one of the available options"

    def test_required_missing(self):
        assert validate_choice(None, ["owner"], required=True) == "Please select an option"


class TestFormatPhone:
    @pytest.mark.parametrize("raw,expected", [
        ("0211234567", "021 123 4567"),
        ("091234567", "09 123 4567"),
        ("+64211234567", "+64 21 123 4567"),
        ("021", "021"),
        ("02112", "021 12"),
        ("", ""),
    ])
    def test_formats(self, raw, expected):
        assert format_nz_phone(raw) == expected
