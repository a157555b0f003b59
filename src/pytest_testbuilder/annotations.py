"""Decorators declaring how the builder should treat a test method or class.

Metadata is stored in a ``__testbuilder__`` dict on the decorated object and
read back by :class:`pytest_testbuilder.metadata.AttributeMetadataResolver`.
"""

import typing

ATTRIBUTE_NAME = "__testbuilder__"

T = typing.TypeVar("T")


def get_options(obj: typing.Any) -> typing.Dict[str, typing.Any]:
    # vars() so a subclass does not pick up its base class' options
    if isinstance(obj, type):
        return vars(obj).get(ATTRIBUTE_NAME, {})
    return getattr(obj, ATTRIBUTE_NAME, {})


def _options_for_update(obj: typing.Any) -> typing.Dict[str, typing.Any]:
    options = dict(get_options(obj))
    setattr(obj, ATTRIBUTE_NAME, options)
    return options


def _set_option(key: str, value: typing.Any) -> typing.Callable[[T], T]:
    def decorator(obj: T) -> T:
        _options_for_update(obj)[key] = value
        return obj

    return decorator


def data_provider(*names: str) -> typing.Callable[[T], T]:
    """Name the methods of the test class that provide data sets.

    Several providers may be given, their data sets are used in order.
    """

    def decorator(obj: T) -> T:
        options = _options_for_update(obj)
        options["data_providers"] = tuple(options.get("data_providers", ())) + names
        return obj

    return decorator


def test_with(*rows: typing.Sequence[typing.Any]) -> typing.Callable[[T], T]:
    """Inline data sets, keyed by position."""

    def decorator(obj: T) -> T:
        options = _options_for_update(obj)
        options["test_with"] = tuple(options.get("test_with", ())) + rows
        return obj

    return decorator


test_with.__test__ = False  # type: ignore[attr-defined]


def group(*names: str) -> typing.Callable[[T], T]:
    def decorator(obj: T) -> T:
        options = _options_for_update(obj)
        options["groups"] = frozenset(options.get("groups", frozenset())) | set(names)
        return obj

    return decorator


def run_in_separate_process(obj: T) -> T:
    return _set_option("run_in_separate_process", True)(obj)


def run_tests_in_separate_processes(cls: T) -> T:
    return _set_option("run_tests_in_separate_processes", True)(cls)


def run_class_in_separate_process(cls: T) -> T:
    return _set_option("run_class_in_separate_process", True)(cls)


def preserve_global_state(enabled: bool) -> typing.Callable[[T], T]:
    return _set_option("preserve_global_state", enabled)


def backup_globals(enabled: bool) -> typing.Callable[[T], T]:
    return _set_option("backup_globals", enabled)


def backup_static_attributes(enabled: bool) -> typing.Callable[[T], T]:
    return _set_option("backup_static_attributes", enabled)
