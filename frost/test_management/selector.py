"""Test selection with ``suite[:glob]`` patterns."""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Pattern as RegexPattern, Tuple

from ..core.errors import NoMatchingTestError, PatternError
from ..core.log import get_logger
from ..core.types import Suite, Test
from .registry import Registry

logger = get_logger(__name__)


# Characters that must be escaped inside a regex character class
_CLASS_SPECIAL = frozenset("\\]^-[")


def _bracket_end(glob: str, start: int) -> int:
    """Index of the ``]`` closing the bracket expression opened before ``start``, or -1."""
    i, n = start, len(glob)
    if i < n and glob[i] in "!^":
        i += 1
    # A ']' right after the opening bracket is a literal member
    if i < n and glob[i] == "]":
        i += 1
    while i < n and glob[i] != "]":
        i += 2 if glob[i] == "\\" else 1
    return i if i < n else -1


def _bracket_class(body: str) -> str:
    negate = body[:1] in ("!", "^")
    if negate:
        body = body[1:]
    members: List[Tuple[str, bool]] = []
    i = 0
    while i < len(body):
        if body[i] == "\\" and i + 1 < len(body):
            members.append((body[i + 1], True))
            i += 2
        else:
            members.append((body[i], False))
            i += 1
    out = []
    for index, (char, escaped) in enumerate(members):
        if char == "-" and not escaped and 0 < index < len(members) - 1:
            out.append("-")
        elif char in _CLASS_SPECIAL:
            out.append("\\" + char)
        else:
            out.append(char)
    return "[" + ("^" if negate else "") + "".join(out) + "]"


def glob_to_regex(glob: str) -> str:
    """Translate a shell glob to a regex matching whole names.

    ``*``, ``?`` and bracket expressions (negated by ``!`` or ``^``) are
    wildcards; a backslash makes the next character literal. ``/`` and a
    leading ``.`` are ordinary characters. Raises PatternError for an
    unterminated bracket expression.
    """
    parts = []
    i, n = 0, len(glob)
    while i < n:
        char = glob[i]
        i += 1
        if char == "\\" and i < n:
            parts.append(re.escape(glob[i]))
            i += 1
        elif char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == "[":
            end = _bracket_end(glob, i)
            if end < 0:
                raise PatternError(f"Unterminated bracket expression in pattern '{glob}'", glob)
            parts.append(_bracket_class(glob[i:end]))
            i = end + 1
        else:
            parts.append(re.escape(char))
    return "(?s:" + "".join(parts) + r")\Z"


@dataclass(frozen=True)
class Pattern:
    """A ``suite`` or ``suite:glob`` selector.

    The suite part is compared exactly; the glob part uses shell wildcards
    (``*``, ``?``, ``[...]``, ``[!...]``, ``[^...]``, ``\\`` escapes) and is case-sensitive.
    """

    text: str
    suite: str
    glob: Optional[str] = None
    regex: Optional[RegexPattern[str]] = field(default=None, compare=False, repr=False)

    @classmethod
    def parse(cls, text: str) -> "Pattern":
        suite, sep, glob = text.partition(":")
        if not sep:
            return cls(text=text, suite=suite)
        try:
            regex = re.compile(glob_to_regex(glob))
        except re.error as e:
            raise PatternError(f"Invalid pattern '{text}': {e}", glob) from e
        return cls(text=text, suite=suite, glob=glob, regex=regex)

    def match_suite(self, name: str) -> bool:
        return self.suite == name

    def match_test(self, name: str) -> bool:
        if self.regex is None:
            return True
        return self.regex.match(name) is not None

    def matches(self, suite: Suite, test: Test) -> bool:
        return self.match_suite(suite.name) and self.match_test(test.name)


class Selector:
    """Decides which suites and tests run; no patterns selects everything."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self.patterns: List[Pattern] = [Pattern.parse(p) for p in patterns]
        logger.debug("Selector patterns: %s", [p.text for p in self.patterns])

    @property
    def selects_all(self) -> bool:
        return not self.patterns

    def is_suite_enabled(self, suite: Suite) -> bool:
        if self.selects_all:
            return True
        return any(p.match_suite(suite.name) for p in self.patterns)

    def is_unit_enabled(self, suite: Suite, test: Test) -> bool:
        if self.selects_all:
            return True
        return any(p.matches(suite, test) for p in self.patterns)

    def enabled_tests(self, suite: Suite) -> List[Test]:
        """Enabled tests of a suite in declaration order."""
        return [test for test in suite.tests if self.is_unit_enabled(suite, test)]

    @staticmethod
    def find_unit(registry: Registry, pattern: str) -> Tuple[Suite, Test]:
        """First test in registration order matching ``pattern``."""
        parsed = Pattern.parse(pattern)
        for suite in registry.suites:
            if not parsed.match_suite(suite.name):
                continue
            for test in suite.tests:
                if parsed.match_test(test.name):
                    return suite, test
        raise NoMatchingTestError(f"Could not find test matching '{pattern}'", pattern)
