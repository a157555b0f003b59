import abc
import inspect
import logging
import typing
from abc import abstractmethod

import pytest

from pytest_testbuilder import annotations
from pytest_testbuilder.definitions import (
    BackupSettings,
    DataKey,
    ExecutionPolicy,
    IncompleteSignal,
    ProvidedData,
    ProviderFailure,
    ProviderOutcome,
    SkippedSignal,
)
from pytest_testbuilder.errors import (
    IncompleteTestError,
    InvalidDataProviderError,
    SkippedTestError,
)

logger = logging.getLogger("pytest-testbuilder")


class MetadataResolver(metaclass=abc.ABCMeta):
    @abstractmethod
    def backup_settings(self, test_class: type, method_name: str) -> BackupSettings: ...

    @abstractmethod
    def preserve_global_state(
        self, test_class: type, method_name: str
    ) -> typing.Optional[bool]: ...

    @abstractmethod
    def process_isolation(self, test_class: type, method_name: str) -> bool: ...

    @abstractmethod
    def class_process_isolation(self, test_class: type, method_name: str) -> bool: ...

    @abstractmethod
    def provided_data(
        self, test_class: type, method_name: str
    ) -> typing.Optional[ProviderOutcome]:
        """Data sets for the method, or None if it declares no data provider.

        Provider errors are reported through the returned outcome, never raised.
        """

    @abstractmethod
    def groups(self, test_class: type, method_name: str) -> typing.FrozenSet[str]: ...

    def execution_policy(self, test_class: type, method_name: str) -> ExecutionPolicy:
        backup_settings = self.backup_settings(test_class, method_name)
        return ExecutionPolicy(
            run_in_separate_process=self.process_isolation(test_class, method_name),
            run_class_in_separate_process=self.class_process_isolation(
                test_class, method_name
            ),
            preserve_global_state=self.preserve_global_state(test_class, method_name),
            backup_globals=backup_settings.backup_globals,
            backup_static_attributes=backup_settings.backup_static_attributes,
        )


class AttributeMetadataResolver(MetadataResolver):
    """Reads the metadata declared with the decorators in ``annotations``."""

    def _method_options(
        self, test_class: type, method_name: str
    ) -> typing.Dict[str, typing.Any]:
        return annotations.get_options(getattr(test_class, method_name, None))

    def _class_options(self, test_class: type) -> typing.Dict[str, typing.Any]:
        # options declared on base classes apply too, nearest class wins
        options: typing.Dict[str, typing.Any] = {}
        for klass in reversed(test_class.__mro__):
            options.update(annotations.get_options(klass))
        return options

    def _setting(
        self, test_class: type, method_name: str, key: str
    ) -> typing.Optional[bool]:
        method_options = self._method_options(test_class, method_name)
        if key in method_options:
            return method_options[key]
        return self._class_options(test_class).get(key)

    def backup_settings(self, test_class: type, method_name: str) -> BackupSettings:
        return BackupSettings(
            backup_globals=self._setting(test_class, method_name, "backup_globals"),
            backup_static_attributes=self._setting(
                test_class, method_name, "backup_static_attributes"
            ),
        )

    def preserve_global_state(
        self, test_class: type, method_name: str
    ) -> typing.Optional[bool]:
        return self._setting(test_class, method_name, "preserve_global_state")

    def process_isolation(self, test_class: type, method_name: str) -> bool:
        if self._class_options(test_class).get("run_tests_in_separate_processes"):
            return True
        return bool(
            self._method_options(test_class, method_name).get("run_in_separate_process")
        )

    def class_process_isolation(self, test_class: type, method_name: str) -> bool:
        return bool(
            self._class_options(test_class).get("run_class_in_separate_process")
        )

    def groups(self, test_class: type, method_name: str) -> typing.FrozenSet[str]:
        return frozenset(self._class_options(test_class).get("groups", ())) | frozenset(
            self._method_options(test_class, method_name).get("groups", ())
        )

    def provided_data(
        self, test_class: type, method_name: str
    ) -> typing.Optional[ProviderOutcome]:
        options = self._method_options(test_class, method_name)
        provider_names = options.get("data_providers", ())
        inline_rows = options.get("test_with")
        if not provider_names and inline_rows is None:
            return None

        try:
            rows = self._collect_rows(test_class, provider_names, inline_rows or ())
        except (IncompleteTestError, pytest.xfail.Exception) as e:
            return IncompleteSignal(_message_of(e))
        except (SkippedTestError, pytest.skip.Exception) as e:
            return SkippedSignal(_message_of(e))
        except (Exception, pytest.fail.Exception) as e:
            logger.warning(
                f"Data provider for {test_class.__qualname__}::{method_name} failed: {e!r}"
            )
            return ProviderFailure(_message_of(e))

        return ProvidedData(rows)

    def _collect_rows(
        self,
        test_class: type,
        provider_names: typing.Sequence[str],
        inline_rows: typing.Sequence[typing.Sequence[typing.Any]],
    ) -> typing.Dict[DataKey, typing.Sequence[typing.Any]]:
        rows: typing.Dict[DataKey, typing.Sequence[typing.Any]] = {}
        next_index = 0

        def add(key: DataKey, row: typing.Any) -> None:
            nonlocal next_index
            if isinstance(key, int):
                key = next_index
                next_index += 1
            if not isinstance(row, (list, tuple)):
                raise InvalidDataProviderError(
                    f"Data set {_describe_key(key)} is invalid."
                )
            rows[key] = tuple(row)

        for provider_name in provider_names:
            provider = self._bind_provider(test_class, provider_name)
            data = provider()
            if isinstance(data, typing.Mapping):
                items: typing.Iterable[typing.Tuple[DataKey, typing.Any]] = data.items()
            else:
                items = enumerate(data)
            for key, row in items:
                add(key, row)

        for row in inline_rows:
            add(next_index, row)

        return rows

    def _bind_provider(
        self, test_class: type, provider_name: str
    ) -> typing.Callable[[], typing.Any]:
        try:
            raw = inspect.getattr_static(test_class, provider_name)
        except AttributeError:
            raise InvalidDataProviderError(
                f"Method {test_class.__qualname__}::{provider_name} does not exist"
            ) from None

        if isinstance(raw, (staticmethod, classmethod)):
            return getattr(test_class, provider_name)
        if not callable(raw):
            raise InvalidDataProviderError(
                f"{test_class.__qualname__}::{provider_name} is not callable"
            )
        # instance method: bind to an instance without running the constructor
        return getattr(test_class.__new__(test_class), provider_name)


def _describe_key(key: DataKey) -> str:
    if isinstance(key, int):
        return f"#{key}"
    return f'"{key}"'


def _message_of(e: BaseException) -> str:
    if isinstance(
        e, (pytest.skip.Exception, pytest.xfail.Exception, pytest.fail.Exception)
    ):
        # str() of an outcome without a reason is "<Skipped instance>"
        return e.msg or ""
    return str(e)
