def test_builds_plain_and_data_provider_tests(pytester):
    pytester.makepyfile(
        """
        from pytest_testbuilder.annotations import data_provider
        from pytest_testbuilder.cases import TestCase


        class Calculator(TestCase):
            @staticmethod
            def additions():
                return {"small": (1, 1, 2), "wrong": (1, 1, 3)}

            @data_provider("additions")
            def test_add(self, a, b, expected):
                assert a + b == expected

            def test_plain(self):
                assert self.get_name() == "test_plain"
    """
    )
    result = pytester.runpytest("-v", "--test-builder")
    result.assert_outcomes(passed=2, failed=1)
    result.stdout.re_match_lines(
        [
            r".*Calculator::test_add\[small\] PASSED.*",
            r".*Calculator::test_add\[wrong\] FAILED.*",
            r".*Calculator::test_plain PASSED.*",
        ],
        consecutive=True,
    )


def test_not_collected_without_option(pytester):
    pytester.makepyfile(
        """
        from pytest_testbuilder.cases import TestCase


        class Calculator(TestCase):
            def test_plain(self):
                assert False
    """
    )
    result = pytester.runpytest()
    result.assert_outcomes()


def test_diagnostics_are_reported(pytester):
    pytester.makepyfile(
        """
        from pytest_testbuilder.annotations import data_provider
        from pytest_testbuilder.cases import TestCase
        from pytest_testbuilder.errors import IncompleteTestError, SkippedTestError


        class Diagnostics(TestCase):
            @staticmethod
            def empty():
                return []

            @staticmethod
            def broken():
                raise RuntimeError("oops")

            @staticmethod
            def skipping():
                raise SkippedTestError("no network")

            @staticmethod
            def incomplete():
                raise IncompleteTestError()

            @data_provider("empty")
            def test_empty(self):
                pass

            @data_provider("broken")
            def test_broken(self):
                pass

            @data_provider("skipping")
            def test_skipped(self):
                pass

            @data_provider("incomplete")
            def test_incomplete(self):
                pass
    """
    )
    result = pytester.runpytest("-rsx", "--test-builder")
    result.assert_outcomes(passed=2, skipped=1, xfailed=1, warnings=2)
    result.stdout.fnmatch_lines(
        [
            '*No tests found in suite "Diagnostics::test_empty".*',
            "*The data provider specified for Diagnostics::test_broken is invalid.*",
            "*Test for Diagnostics::test_skipped skipped by data provider*",
            "*Test for Diagnostics::test_incomplete marked incomplete by data provider*",
        ],
    )


def test_abstract_base_classes_are_not_collected(pytester):
    pytester.makepyfile(
        """
        import abc

        from pytest_testbuilder.cases import TestCase


        class Base(TestCase, metaclass=abc.ABCMeta):
            @abc.abstractmethod
            def subject(self): ...

            def test_subject(self):
                assert self.subject() == 1


        class Concrete(Base):
            def subject(self):
                return 1
    """
    )
    result = pytester.runpytest("-v", "--test-builder")
    result.assert_outcomes(passed=1)
    result.stdout.re_match_lines([r".*Concrete::test_subject PASSED.*"])


def test_group_selection(pytester):
    pytester.makepyfile(
        """
        from pytest_testbuilder.annotations import group, test_with
        from pytest_testbuilder.cases import TestCase


        @group("slow")
        class Grouped(TestCase):
            @group("database")
            @test_with((1,), (2,))
            def test_query(self, value):
                pass

            def test_compute(self):
                pass


        class Ungrouped(TestCase):
            def test_fast(self):
                pass
    """
    )
    result = pytester.runpytest("--test-builder", "--test-builder-group=database")
    result.assert_outcomes(passed=2, deselected=2)

    result = pytester.runpytest(
        "--test-builder", "--test-builder-exclude-group=slow"
    )
    result.assert_outcomes(passed=1, deselected=3)

    result = pytester.runpytest("--test-builder", "--test-builder-group=default")
    result.assert_outcomes(passed=1, deselected=3)

    result = pytester.runpytest("--test-builder", "-k", "database")
    result.assert_outcomes(passed=2, deselected=2)


def test_marker_and_execution_policy(pytester):
    pytester.makeconftest(
        """
        def pytest_runtest_logreport(report):
            if report.when == "call":
                print("PROPS", report.nodeid, dict(report.user_properties))
    """
    )
    pytester.makepyfile(
        """
        from pytest_testbuilder.annotations import (
            preserve_global_state,
            run_in_separate_process,
        )
        from pytest_testbuilder.cases import TestCase


        class Isolated(TestCase):
            @run_in_separate_process
            @preserve_global_state(True)
            def test_isolated(self):
                assert self.run_test_in_separate_process
                assert self.preserve_global_state

            def test_shared(self):
                assert not self.run_test_in_separate_process
    """
    )
    result = pytester.runpytest("-s", "--test-builder", "-m", "testbuilder")
    result.assert_outcomes(passed=2)
    result.stdout.fnmatch_lines(
        [
            "*PROPS*test_isolated*'run_test_in_separate_process': True*"
            "'preserve_global_state': True*",
        ]
    )


def test_custom_resolver_hook(pytester):
    pytester.makeconftest(
        """
        from pytest_testbuilder.definitions import ProvidedData
        from pytest_testbuilder.metadata import AttributeMetadataResolver


        class EverythingHasData(AttributeMetadataResolver):
            def provided_data(self, test_class, method_name):
                return ProvidedData({"first": (1,), "second": (2,)})


        def pytest_testbuilder_resolver(config):
            return EverythingHasData()
    """
    )
    pytester.makepyfile(
        """
        from pytest_testbuilder.cases import TestCase


        class Anything(TestCase):
            def test_value(self, value):
                assert value in (1, 2)
    """
    )
    result = pytester.runpytest("-v", "--test-builder")
    result.assert_outcomes(passed=2)
    result.stdout.re_match_lines(
        [
            r".*Anything::test_value\[first\] PASSED.*",
            r".*Anything::test_value\[second\] PASSED.*",
        ],
        consecutive=True,
    )


def test_data_set_with_empty_key_keeps_its_suffix(pytester):
    pytester.makeconftest(
        """
        from pytest_testbuilder.definitions import ProvidedData
        from pytest_testbuilder.metadata import AttributeMetadataResolver


        class EmptyKey(AttributeMetadataResolver):
            def provided_data(self, test_class, method_name):
                return ProvidedData({"": ()})


        def pytest_testbuilder_resolver(config):
            return EmptyKey()
    """
    )
    pytester.makepyfile(
        """
        from pytest_testbuilder.cases import TestCase


        class Anything(TestCase):
            def test_nothing(self):
                assert self.data_name == ""
    """
    )
    result = pytester.runpytest("-v", "--test-builder")
    result.assert_outcomes(passed=1)
    result.stdout.re_match_lines([r".*Anything::test_nothing\[\] PASSED.*"])
