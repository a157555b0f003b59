import inspect
import logging
import typing

import pytest
from _pytest.config.argparsing import Parser

from pytest_testbuilder import hooks
from pytest_testbuilder.builder import TestBuilder
from pytest_testbuilder.cases import DEFAULT_GROUP, Test, TestCase
from pytest_testbuilder.definitions import TestKind
from pytest_testbuilder.descriptors import get_descriptor

logger = logging.getLogger("pytest-testbuilder")

MARKER_NAME = "testbuilder"


def get_test_method_names(test_class: type) -> typing.List[str]:
    # definition order, base class methods first
    names: typing.Dict[str, None] = {}
    for klass in reversed(test_class.__mro__):
        for name, member in vars(klass).items():
            if name.startswith("test") and inspect.isfunction(member):
                names[name] = None
    return list(names)


def iter_built_tests(
    method_name: str, test: Test, groups: typing.AbstractSet[str]
) -> typing.Generator[typing.Tuple[str, typing.Any, typing.AbstractSet[str]], None, None]:
    # flatten a build result into (item name, test, groups)
    if getattr(test, "kind", None) is not TestKind.suite:
        yield method_name, test, groups
        return

    for child in test:
        child_groups = test.groups_of(child)
        if child.kind is TestKind.parameterized:
            yield f"{method_name}[{child.data_name}]", child, child_groups
        else:
            yield method_name, child, child_groups


class TestBuilderItem(pytest.Item):
    def __init__(
        self,
        name: str,
        parent: "TestBuilderClass",
        test: typing.Any,
        groups: typing.AbstractSet[str],
        **kwargs,
    ) -> None:
        super().__init__(name, parent, **kwargs)
        self.add_marker(MARKER_NAME)
        self.test = test
        self.groups = frozenset(groups)
        self.extra_keyword_matches.update(self.groups)
        if isinstance(test, TestCase):
            self.user_properties.extend(
                [
                    ("run_test_in_separate_process", test.run_test_in_separate_process),
                    (
                        "run_class_in_separate_process",
                        test.run_class_in_separate_process,
                    ),
                    ("preserve_global_state", test.preserve_global_state),
                    ("backup_globals", test.backup_globals),
                    ("backup_static_attributes", test.backup_static_attributes),
                ]
            )

    def runtest(self):
        self.test.run()

    def reportinfo(self):
        return self.path, None, f"{self.parent.name}::{self.name}"


class TestBuilderClass(pytest.Collector):
    def __init__(self, name: str, parent: pytest.Module, test_class: type, **kwargs):
        super().__init__(name, parent, **kwargs)
        self.test_class = test_class

    def collect(self):
        resolver = self.config.hook.pytest_testbuilder_resolver(config=self.config)
        builder = TestBuilder(resolver)
        descriptor = get_descriptor(self.test_class)

        for method_name in get_test_method_names(self.test_class):
            test = builder.build(descriptor, method_name)
            groups = builder.resolver.groups(self.test_class, method_name) or {
                DEFAULT_GROUP
            }
            for name, built, built_groups in iter_built_tests(method_name, test, groups):
                yield TestBuilderItem.from_parent(
                    self, name=name, test=built, groups=built_groups
                )


def is_builder_test_class(module: typing.Any, obj: typing.Any) -> bool:
    return (
        inspect.isclass(obj)
        and issubclass(obj, TestCase)
        and obj is not TestCase
        and not inspect.isabstract(obj)
        and obj.__module__ == module.__name__
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pycollect_makeitem(collector, name, obj):
    if not collector.config.option.testbuilder:
        return None
    if not isinstance(collector, pytest.Module):
        return None
    if not is_builder_test_class(collector.obj, obj):
        return None

    logger.debug(f"Collecting {obj.__qualname__} with the test builder")
    return TestBuilderClass.from_parent(collector, name=name, test_class=obj)


def pytest_collection_modifyitems(config, items):
    included = set(config.option.testbuilder_groups or ())
    excluded = set(config.option.testbuilder_exclude_groups or ())
    if not included and not excluded:
        return

    selected = []
    deselected = []
    for item in items:
        groups = getattr(item, "groups", None)
        if not isinstance(item, TestBuilderItem) or (
            (not included or groups & included) and not groups & excluded
        ):
            selected.append(item)
        else:
            deselected.append(item)

    if deselected:
        config.hook.pytest_deselected(items=deselected)
        items[:] = selected


def pytest_configure(config):
    config.addinivalue_line(
        "markers", f"{MARKER_NAME}: filter for pytest-testbuilder generated tests"
    )


def pytest_addoption(parser: Parser) -> None:
    group = parser.getgroup("collect")
    group.addoption(
        "--test-builder",
        action="store_true",
        default=False,
        help="collect TestCase subclasses with the test builder",
        dest="testbuilder",
    )
    group.addoption(
        "--test-builder-group",
        action="append",
        default=[],
        metavar="GROUP",
        help="only run test builder tests in this group (may be repeated)",
        dest="testbuilder_groups",
    )
    group.addoption(
        "--test-builder-exclude-group",
        action="append",
        default=[],
        metavar="GROUP",
        help="skip test builder tests in this group (may be repeated)",
        dest="testbuilder_exclude_groups",
    )


def pytest_addhooks(pluginmanager):
    pluginmanager.add_hookspecs(hooks)
