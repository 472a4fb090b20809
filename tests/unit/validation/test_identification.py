"""Unit tests for identification number checks."""

import pytest

from coursereg.errors import ValidationError
from coursereg.validation import is_valid_cedula, normalize_identification


@pytest.mark.unit
class TestCedula:
    """Tests for the cedula check digit."""

    @pytest.mark.parametrize("value", ["1710034065", "0926687856"])
    def test_valid_cedulas(self, value: str) -> None:
        assert is_valid_cedula(value)

    def test_wrong_check_digit(self) -> None:
        assert not is_valid_cedula("1710034066")

    def test_province_out_of_range(self) -> None:
        assert not is_valid_cedula("2510034065")
        assert not is_valid_cedula("0010034065")

    def test_third_digit_for_companies_rejected(self) -> None:
        assert not is_valid_cedula("1760034065")

    def test_wrong_length(self) -> None:
        assert not is_valid_cedula("171003406")


@pytest.mark.unit
class TestNormalizeIdentification:
    """Tests for normalize_identification."""

    def test_strips_whitespace(self) -> None:
        assert normalize_identification("  1710034065 ") == "1710034065"

    def test_invalid_cedula_rejected(self) -> None:
        with pytest.raises(ValidationError, match="check digit"):
            normalize_identification("1710034066")

    def test_passport_accepted(self) -> None:
        assert normalize_identification("AB123456") == "AB123456"

    def test_garbage_rejected(self) -> None:
        with pytest.raises(ValidationError, match="passport"):
            normalize_identification("ab-12")
