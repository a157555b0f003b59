import pytest


class NoValidTestError(Exception):
    """The class cannot produce a test at all (it declares no constructor)."""


class IncompleteTestError(Exception):
    """Raised by a data provider to mark the test method incomplete."""


class SkippedTestError(Exception):
    """Raised by a data provider to skip the test method."""


class InvalidDataProviderError(Exception):
    pass


class TestBuilderWarning(pytest.PytestWarning):
    __test__ = False
