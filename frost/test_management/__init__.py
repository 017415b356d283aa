"""Suite registration and test selection."""

from .registry import (
    AFTER_EACH_ID,
    BEFORE_EACH_ID,
    DISCOVERY_ID,
    FIRST_TEST_ID,
    Registry,
    SuiteContext,
    describe,
    dispatch_unit,
    get_registry,
    register,
)
from .selector import Pattern, Selector

__all__ = [
    # Registration
    "Registry",
    "SuiteContext",
    "describe",
    "register",
    "get_registry",
    "dispatch_unit",
    "DISCOVERY_ID",
    "BEFORE_EACH_ID",
    "AFTER_EACH_ID",
    "FIRST_TEST_ID",
    # Selection
    "Pattern",
    "Selector",
]
