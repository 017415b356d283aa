"""Helpers for writing test bodies."""

from .assertions import (
    assert_equal,
    assert_failure,
    assert_not_equal,
    assert_success,
    assert_true,
    fail,
)

__all__ = [
    "fail",
    "assert_true",
    "assert_equal",
    "assert_not_equal",
    "assert_success",
    "assert_failure",
]
