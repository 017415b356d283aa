"""Suite registration and test discovery.

A suite is a dispatch function that declares its tests through a
:class:`SuiteContext`::

    @frost.describe()
    def math(t):
        @t.before_each
        def _():
            ...

        @t.it("adds")
        def _():
            frost.assert_equal(1 + 1, 2)

The same dispatch function serves three purposes depending on the id the
context carries: discovery (collect test descriptors, run nothing), a hook
(before-each or after-each), or exactly one test body. Test ids are handed out
in declaration order, so every process that runs the same program agrees on
them.
"""

from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from ..core.errors import RegistryError
from ..core.log import get_logger
from ..core.types import DEFAULT_TIMEOUT, Dispatch, Suite, Test

logger = get_logger(__name__)

DISCOVERY_ID = 0
BEFORE_EACH_ID = 1
AFTER_EACH_ID = 2
FIRST_TEST_ID = 3

Body = Callable[[], None]


class SuiteContext:
    """Handle passed to a suite's dispatch function."""

    def __init__(self, suite_name: str, target_id: int = DISCOVERY_ID) -> None:
        self.suite_name = suite_name
        self.target_id = target_id
        self.tests: List[Test] = []
        self.matched = False
        self._next_id = FIRST_TEST_ID

    @property
    def discovering(self) -> bool:
        """Whether this call only collects test descriptors."""
        return self.target_id == DISCOVERY_ID

    def _run_if(self, target_id: int) -> Callable[[Body], Body]:
        def decorator(body: Body) -> Body:
            if self.target_id == target_id:
                self.matched = True
                body()
            return body

        return decorator

    def test(
        self, name: str, timeout: float = DEFAULT_TIMEOUT, threads: int = 1
    ) -> Callable[[Body], Body]:
        """Declare a test; the decorated body runs only when this test is selected.

        ``timeout`` is in seconds; ``threads`` worker threads each run the body.
        """
        test_id = self._next_id
        self._next_id += 1
        if self.discovering:
            self.tests.append(self._descriptor(name, test_id, threads, timeout))
        return self._run_if(test_id)

    def it(self, name: str) -> Callable[[Body], Body]:
        """Declare a single-threaded test with the default timeout."""
        return self.test(name)

    def parallel(self, name: str, threads: int) -> Callable[[Body], Body]:
        """Declare a test run by ``threads`` worker threads at once."""
        return self.test(f"{name} (parallel {threads})", threads=threads)

    def before_each(self, body: Body) -> Body:
        """Hook run in the unit process before every test of the suite."""
        return self._run_if(BEFORE_EACH_ID)(body)

    def after_each(self, body: Body) -> Body:
        """Hook run in the unit process after every test of the suite."""
        return self._run_if(AFTER_EACH_ID)(body)

    def _descriptor(self, name: str, test_id: int, threads: int, timeout: float) -> Test:
        if not name:
            raise RegistryError(f"Suite {self.suite_name} declares a test without a name")
        if threads < 1:
            raise RegistryError(
                f"Test {self.suite_name}:{name} needs at least one thread, got {threads}"
            )
        if timeout <= 0:
            raise RegistryError(
                f"Test {self.suite_name}:{name} needs a positive timeout, got {timeout}"
            )
        return Test(name=name, id=test_id, threads=threads, timeout=float(timeout))


class Registry:
    """Ordered set of suites, frozen before execution starts."""

    def __init__(self) -> None:
        self._suites: Dict[str, Suite] = {}
        self._frozen = False

    def register(self, name: str, dispatch: Dispatch) -> Suite:
        """Discover the tests of ``dispatch`` and store them as suite ``name``."""
        if self._frozen:
            raise RegistryError(f"Cannot register suite {name}: registry is frozen")
        if not name:
            raise RegistryError("Suite name must not be empty")
        if name in self._suites:
            raise RegistryError(f"Suite {name} is already registered")

        context = SuiteContext(name)
        dispatch(context)
        suite = Suite(name=name, tests=tuple(context.tests), dispatch=dispatch)
        self._suites[name] = suite
        logger.debug("Registered suite %s with %d tests", name, len(suite.tests))
        return suite

    def describe(
        self, name: Union[str, Dispatch, None] = None
    ) -> Union[Dispatch, Callable[[Dispatch], Dispatch]]:
        """Decorator form of :meth:`register`; the name defaults to the function's."""
        if callable(name):
            self.register(name.__name__, name)
            return name

        def decorator(dispatch: Dispatch) -> Dispatch:
            self.register(name or dispatch.__name__, dispatch)
            return dispatch

        return decorator

    def freeze(self) -> None:
        """End of setup; further registration is rejected."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def suites(self) -> Tuple[Suite, ...]:
        """Suites in registration order."""
        return tuple(self._suites.values())

    def find_suite(self, name: str) -> Optional[Suite]:
        return self._suites.get(name)

    @property
    def test_count(self) -> int:
        """Number of tests across all suites."""
        return sum(len(suite.tests) for suite in self._suites.values())

    def __len__(self) -> int:
        return len(self._suites)

    def __iter__(self) -> Iterator[Suite]:
        return iter(self.suites)


def dispatch_unit(suite: Suite, target_id: int) -> bool:
    """Invoke the suite's dispatch for one id; return whether a body ran."""
    context = SuiteContext(suite.name, target_id)
    suite.dispatch(context)
    return context.matched


_default_registry = Registry()


def get_registry() -> Registry:
    """Process-wide registry used by :func:`describe` and :func:`register`."""
    return _default_registry


def register(name: str, dispatch: Dispatch) -> Suite:
    """Register a suite in the default registry."""
    return _default_registry.register(name, dispatch)


def describe(name: Union[str, Dispatch, None] = None):
    """Register the decorated dispatch function as a suite in the default registry."""
    return _default_registry.describe(name)
