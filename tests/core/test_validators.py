from __future__ import annotations

import pytest

from src.fieldforce.fieldforce.common.validators import (
    optional_text,
    require_min_length,
    require_non_empty,
    require_non_negative,
    require_positive,
)
from src.fieldforce.fieldforce.core.exceptions import ValidationError


@pytest.mark.parametrize("value", [123, 4.5, ["a"], {"text": "a"}, True])
def test_text_helpers_reject_non_strings(value):
    with pytest.raises(ValidationError, match="Reason must be text"):
        require_non_empty(value, "Reason")
    with pytest.raises(ValidationError, match="Note must be text"):
        optional_text(value, "Note")
    with pytest.raises(ValidationError, match="Password must be text"):
        require_min_length(value, "Password", 6)


def test_text_helpers_strip_and_blank():
    assert require_non_empty("  Trip ", "Reason") == "Trip"
    assert optional_text("   ") is None
    assert optional_text(None) is None
    with pytest.raises(ValidationError, match="is required"):
        require_non_empty("  ", "Reason")


@pytest.mark.parametrize("value", ["NaN", float("nan"), "inf", float("-inf"), "Infinity"])
def test_numbers_must_be_finite(value):
    with pytest.raises(ValidationError, match="finite"):
        require_positive(value, "Quantity")
    with pytest.raises(ValidationError, match="finite"):
        require_non_negative(value, "Hours spent")


def test_number_bounds():
    assert require_positive("2.5", "Quantity") == 2.5
    assert require_non_negative(0, "Hours spent") == 0.0
    with pytest.raises(ValidationError):
        require_positive(0, "Quantity")
    with pytest.raises(ValidationError):
        require_non_negative(-1, "Hours spent")
    with pytest.raises(ValidationError, match="must be a number"):
        require_positive(True, "Quantity")
