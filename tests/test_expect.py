import pytest

from hybrid_vqe import ExpectationError, expect


def test_expect_passes() -> None:
    expect(abs(-1.75 + 1.74886) < 0.1)


def test_expect_fails_with_message() -> None:
    with pytest.raises(ExpectationError, match="energy too high"):
        expect(False, "energy too high")


def test_expectation_error_is_assertion_error() -> None:
    with pytest.raises(AssertionError):
        expect(False)
