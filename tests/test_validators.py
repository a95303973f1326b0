#!/usr/bin/env python3
"""
Unit tests for submission validation
"""

import pytest

from errors import InvalidRequest
from transfer.models import PrivacyStatus
from utils.validators import (
    sanitize_text,
    validate_description,
    validate_privacy_status,
    validate_source_ref,
    validate_tags,
    validate_title,
    validate_upload_request,
)


class TestValidators:
    """Test input validation functions"""

    def test_source_ref_stripped(self):
        assert validate_source_ref("  1AbCdEf  ") == "1AbCdEf"

    def test_source_ref_empty(self):
        with pytest.raises(InvalidRequest):
            validate_source_ref("")

    def test_title_valid(self):
        assert validate_title("My Trip") == "My Trip"

    def test_title_whitespace_only(self):
        with pytest.raises(InvalidRequest):
            validate_title("   ")

    def test_title_too_long(self):
        with pytest.raises(InvalidRequest):
            validate_title("a" * 101)

    def test_title_control_characters_removed(self):
        assert validate_title("Trip\x00 2025") == "Trip 2025"

    def test_description_empty_becomes_none(self):
        assert validate_description("") is None
        assert validate_description(None) is None

    def test_description_too_long(self):
        with pytest.raises(InvalidRequest):
            validate_description("a" * 5001)

    def test_tags_from_list(self):
        assert validate_tags(["travel", "  ", " beach "]) == ["travel", "beach"]

    def test_tags_from_comma_string(self):
        assert validate_tags("travel, beach") == ["travel", "beach"]

    def test_tags_none(self):
        assert validate_tags(None) == []

    def test_tags_non_string(self):
        with pytest.raises(InvalidRequest):
            validate_tags(["ok", 3])

    def test_privacy_default_is_private(self):
        assert validate_privacy_status(None) == PrivacyStatus.PRIVATE

    def test_privacy_case_insensitive(self):
        assert validate_privacy_status("PUBLIC") == PrivacyStatus.PUBLIC

    def test_privacy_invalid(self):
        with pytest.raises(InvalidRequest):
            validate_privacy_status("friends-only")

    def test_sanitize_text_limits_length(self):
        assert sanitize_text("abcdef", max_length=3) == "abc"

    def test_upload_request(self):
        source_ref, metadata = validate_upload_request("f1", "Trip", tags=["a"])

        assert source_ref == "f1"
        assert metadata.title == "Trip"
        assert metadata.description is None
        assert metadata.tags == ["a"]
        assert metadata.privacy_status == PrivacyStatus.PRIVATE
