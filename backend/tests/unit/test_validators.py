"""
Tests for field validators and datetime helpers.
"""

from datetime import datetime, timedelta, timezone

import pytest

from utils.datetime_utils import ensure_utc, is_expired, minutes_from_now, utc_now
from utils.validators import (
    VALID_DIFFICULTY_LEVELS, validate_child_age, validate_choice,
    validate_gender_field, validate_password
)


class TestGender:

    @pytest.mark.parametrize("value,expected", [("male", "male"), (" Female ", "female"), (None, None)])
    def test_valid(self, value, expected):
        assert validate_gender_field(value) == expected

    def test_invalid(self):
        with pytest.raises(ValueError):
            validate_gender_field("other")


class TestChildAge:

    @pytest.mark.parametrize("age", [4, 5])
    def test_in_range(self, age):
        assert validate_child_age(age) == age

    @pytest.mark.parametrize("age", [3, 6, 0, -1])
    def test_out_of_range(self, age):
        with pytest.raises(ValueError):
            validate_child_age(age)


class TestChoice:

    def test_valid_choice(self):
        assert validate_choice("beginner", VALID_DIFFICULTY_LEVELS, "Difficulty level") == "beginner"

    def test_invalid_choice_names_field(self):
        with pytest.raises(ValueError, match="Difficulty level"):
            validate_choice("expert", VALID_DIFFICULTY_LEVELS, "Difficulty level")


class TestPassword:

    def test_minimum_length(self):
        with pytest.raises(ValueError):
            validate_password("12345")
        assert validate_password("123456") == "123456"

    def test_byte_limit_counts_utf8(self):
        # 36 Arabic letters are 72 bytes; one more goes over
        assert validate_password("ب" * 36)
        with pytest.raises(ValueError):
            validate_password("ب" * 37)


class TestDatetimeUtils:

    def test_naive_is_treated_as_utc(self):
        naive = datetime(2026, 1, 1, 12, 0)

        assert ensure_utc(naive) == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_aware_is_converted(self):
        plus_two = timezone(timedelta(hours=2))

        assert ensure_utc(datetime(2026, 1, 1, 14, 0, tzinfo=plus_two)).hour == 12

    def test_none_passes_through(self):
        assert ensure_utc(None) is None

    def test_is_expired(self):
        assert is_expired(None)
        assert is_expired(utc_now() - timedelta(seconds=1))
        assert not is_expired(minutes_from_now(10))

    def test_is_expired_with_naive_deadline(self):
        future = (utc_now() + timedelta(minutes=5)).replace(tzinfo=None)

        assert not is_expired(future)
