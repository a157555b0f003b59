import logging
import typing

from pytest_testbuilder.cases import (
    DataProviderTestSuite,
    IncompleteTestCase,
    SkippedTestCase,
    Test,
    TestCase,
    WarningTestCase,
)
from pytest_testbuilder.definitions import (
    ExecutionPolicy,
    IncompleteSignal,
    ProvidedData,
    ProviderFailure,
    ProviderOutcome,
    SkippedSignal,
    TestSpec,
)
from pytest_testbuilder.descriptors import ClassDescriptor
from pytest_testbuilder.errors import NoValidTestError
from pytest_testbuilder.metadata import AttributeMetadataResolver, MetadataResolver

logger = logging.getLogger("pytest-testbuilder")


class TestBuilder:
    """Turns one declared test method into the test object a runner executes.

    The result is a single test case, a diagnostic pseudo-test, or a
    ``DataProviderTestSuite`` with one case per data set. Every failure except
    a class without constructor is reported through a diagnostic test.
    """

    __test__ = False

    def __init__(self, resolver: typing.Optional[MetadataResolver] = None) -> None:
        self.resolver = resolver or AttributeMetadataResolver()

    def build(self, descriptor: ClassDescriptor, method_name: str) -> Test:
        spec = TestSpec(descriptor.name, method_name)

        if not descriptor.is_instantiable():
            return WarningTestCase(f'Cannot instantiate class "{spec.class_name}".')

        test_class = descriptor.test_class
        policy = self.resolver.execution_policy(test_class, method_name)
        groups = self.resolver.groups(test_class, method_name)

        parameter_count = descriptor.constructor_parameter_count()
        if parameter_count is None:
            raise NoValidTestError("No valid test provided.")

        test: Test
        if parameter_count < 2:
            # TestCase() or TestCase(name)
            test = descriptor.instantiate([])
        else:
            outcome = self.resolver.provided_data(test_class, method_name)
            if outcome is None:
                test = descriptor.instantiate([])
            else:
                test = self._build_data_provider_suite(
                    descriptor, spec, outcome, policy, groups
                )

        if isinstance(test, TestCase):
            test.set_name(method_name)
            policy.apply(test)

        logger.debug(f"Built {spec} as {type(test).__name__}")
        return test

    def _build_data_provider_suite(
        self,
        descriptor: ClassDescriptor,
        spec: TestSpec,
        outcome: ProviderOutcome,
        policy: ExecutionPolicy,
        groups: typing.AbstractSet[str],
    ) -> DataProviderTestSuite:
        suite = DataProviderTestSuite(str(spec))

        if isinstance(outcome, ProvidedData):
            if not outcome.rows:
                suite.add_test(
                    WarningTestCase(f'No tests found in suite "{suite.get_name()}".'),
                    groups,
                )
                return suite

            for data_name, data in outcome.rows.items():
                test = descriptor.instantiate([spec.method_name, data, data_name])
                if isinstance(test, TestCase):
                    policy.apply(test)
                suite.add_test(test, groups)
            return suite

        suite.add_test(self._diagnostic_for(spec, outcome), groups)
        return suite

    def _diagnostic_for(self, spec: TestSpec, outcome: ProviderOutcome):
        if isinstance(outcome, IncompleteSignal):
            return IncompleteTestCase(
                spec.class_name,
                spec.method_name,
                _append_message(
                    f"Test for {spec} marked incomplete by data provider",
                    outcome.message,
                ),
            )
        if isinstance(outcome, SkippedSignal):
            return SkippedTestCase(
                spec.class_name,
                spec.method_name,
                _append_message(
                    f"Test for {spec} skipped by data provider", outcome.message
                ),
            )
        if isinstance(outcome, ProviderFailure):
            return WarningTestCase(
                _append_message(
                    f"The data provider specified for {spec} is invalid.",
                    outcome.message,
                )
            )
        raise TypeError(f"Unexpected data provider outcome for {spec}: {outcome!r}")


def _append_message(message: str, nested: str) -> str:
    if nested:
        return f"{message}\n{nested}"
    return message
