import typing
import warnings

import pytest

from pytest_testbuilder.definitions import DataKey, TestKind
from pytest_testbuilder.errors import TestBuilderWarning

DEFAULT_GROUP = "default"

# data_name default, distinguishes "no data set" from a data set keyed ""
NO_DATA_SET: typing.Any = object()


class TestCase:
    """Base class for test classes built by the test builder.

    A test class declares ``test*`` methods; the builder creates one instance
    per method, or one instance per data set when the method has a data
    provider::

        class CalculatorTest(TestCase):
            @staticmethod
            def additions():
                return {"small": (1, 1, 2), "large": (1000, 1000, 2000)}

            @data_provider("additions")
            def test_add(self, a, b, expected):
                assert a + b == expected
    """

    __test__ = False

    def __init__(
        self,
        name: typing.Optional[str] = None,
        data: typing.Sequence[typing.Any] = (),
        data_name: DataKey = NO_DATA_SET,
    ) -> None:
        self._name = name
        self._data = tuple(data)
        self._with_data_set = data_name is not NO_DATA_SET or bool(self._data)
        self._data_name = "" if data_name is NO_DATA_SET else data_name
        self._run_test_in_separate_process = False
        self._run_class_in_separate_process = False
        self._preserve_global_state = False
        self._backup_globals: typing.Optional[bool] = None
        self._backup_static_attributes: typing.Optional[bool] = None

    @property
    def kind(self) -> TestKind:
        if self._with_data_set:
            return TestKind.parameterized
        return TestKind.plain

    @property
    def data(self) -> typing.Tuple[typing.Any, ...]:
        return self._data

    @property
    def data_name(self) -> DataKey:
        return self._data_name

    def set_name(self, name: str) -> None:
        self._name = name

    def get_name(self, with_data_set: bool = True) -> typing.Optional[str]:
        if with_data_set and self.kind is TestKind.parameterized:
            return f"{self._name} {self.data_set_description()}"
        return self._name

    def data_set_description(self) -> str:
        if isinstance(self._data_name, int):
            return f"with data set #{self._data_name}"
        return f'with data set "{self._data_name}"'

    def set_run_test_in_separate_process(self, value: bool) -> None:
        self._run_test_in_separate_process = value

    def set_run_class_in_separate_process(self, value: bool) -> None:
        self._run_class_in_separate_process = value

    def set_preserve_global_state(self, value: bool) -> None:
        self._preserve_global_state = value

    def set_backup_globals(self, value: bool) -> None:
        self._backup_globals = value

    def set_backup_static_attributes(self, value: bool) -> None:
        self._backup_static_attributes = value

    @property
    def run_test_in_separate_process(self) -> bool:
        return self._run_test_in_separate_process

    @property
    def run_class_in_separate_process(self) -> bool:
        return self._run_class_in_separate_process

    @property
    def preserve_global_state(self) -> bool:
        return self._preserve_global_state

    @property
    def backup_globals(self) -> typing.Optional[bool]:
        return self._backup_globals

    @property
    def backup_static_attributes(self) -> typing.Optional[bool]:
        return self._backup_static_attributes

    def set_up(self) -> None:
        pass

    def tear_down(self) -> None:
        pass

    def run(self) -> None:
        if self._name is None:
            raise RuntimeError(f"{type(self).__qualname__} has no test name set")
        method = getattr(self, self._name)
        self.set_up()
        try:
            method(*self._data)
        finally:
            self.tear_down()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} {self.get_name()!r}>"


class WarningTestCase:
    """Pseudo-test that reports a warning instead of running anything."""

    kind = TestKind.warning

    def __init__(self, message: str = "") -> None:
        self.message = message

    def get_name(self) -> str:
        return "Warning"

    def run(self) -> None:
        warnings.warn(TestBuilderWarning(self.message))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.message == other.message

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.message!r}>"


class SkippedTestCase:
    kind = TestKind.skipped

    def __init__(self, class_name: str, method_name: str, message: str = "") -> None:
        self.class_name = class_name
        self.method_name = method_name
        self.message = message

    def get_name(self) -> str:
        return self.method_name

    def run(self) -> None:
        pytest.skip(self.message)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.message!r}>"


class IncompleteTestCase(SkippedTestCase):
    kind = TestKind.incomplete

    def run(self) -> None:
        pytest.xfail(self.message)


DiagnosticTestCase = typing.Union[WarningTestCase, SkippedTestCase, IncompleteTestCase]


class DataProviderTestSuite:
    """Named composite of the tests generated for one data-driven method."""

    kind = TestKind.suite

    def __init__(self, name: str) -> None:
        self._name = name
        self._tests: typing.List[typing.Any] = []
        self._groups: typing.Dict[str, typing.List[typing.Any]] = {}

    def get_name(self) -> str:
        return self._name

    def add_test(self, test, groups: typing.Iterable[str] = ()) -> None:
        groups = sorted(groups) or [DEFAULT_GROUP]
        self._tests.append(test)
        for group in groups:
            self._groups.setdefault(group, []).append(test)

    def tests(self) -> typing.List[typing.Any]:
        return list(self._tests)

    def groups(self) -> typing.Dict[str, typing.List[typing.Any]]:
        return {group: list(tests) for group, tests in self._groups.items()}

    def group_names(self) -> typing.List[str]:
        return list(self._groups)

    def groups_of(self, test) -> typing.Set[str]:
        return {
            group
            for group, tests in self._groups.items()
            if any(t is test for t in tests)
        }

    def count(self) -> int:
        return len(self._tests)

    def __len__(self) -> int:
        return len(self._tests)

    def __iter__(self) -> typing.Iterator[typing.Any]:
        return iter(self._tests)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (
            self._name == other._name
            and self._tests == other._tests
            and self._groups == other._groups
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name!r} tests={len(self._tests)}>"


Test = typing.Union[TestCase, DiagnosticTestCase, DataProviderTestSuite]
