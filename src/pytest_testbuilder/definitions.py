import typing
from dataclasses import dataclass
from enum import Enum

DataKey = typing.Union[int, str]


class TestKind(Enum):
    __test__ = False

    plain = "plain"
    parameterized = "parameterized"
    warning = "warning"
    skipped = "skipped"
    incomplete = "incomplete"
    suite = "suite"


@dataclass(frozen=True)
class TestSpec:
    __test__ = False

    class_name: str
    method_name: str

    def __str__(self) -> str:
        return f"{self.class_name}::{self.method_name}"


@dataclass(frozen=True)
class BackupSettings:
    backup_globals: typing.Optional[bool] = None
    backup_static_attributes: typing.Optional[bool] = None


@dataclass(frozen=True)
class ExecutionPolicy:
    run_in_separate_process: bool = False
    run_class_in_separate_process: bool = False
    preserve_global_state: typing.Optional[bool] = None
    backup_globals: typing.Optional[bool] = None
    backup_static_attributes: typing.Optional[bool] = None

    def apply(self, test) -> None:
        """Copy the policy onto a case-like test.

        Fields left as None keep whatever default the test already has.
        """
        if self.run_in_separate_process:
            test.set_run_test_in_separate_process(True)

        if self.run_class_in_separate_process:
            test.set_run_class_in_separate_process(True)

        if (
            self.run_in_separate_process or self.run_class_in_separate_process
        ) and self.preserve_global_state is not None:
            test.set_preserve_global_state(self.preserve_global_state)

        if self.backup_globals is not None:
            test.set_backup_globals(self.backup_globals)

        if self.backup_static_attributes is not None:
            test.set_backup_static_attributes(self.backup_static_attributes)


@dataclass(frozen=True)
class ProvidedData:
    rows: typing.Mapping[DataKey, typing.Sequence[typing.Any]]


@dataclass(frozen=True)
class IncompleteSignal:
    message: str = ""


@dataclass(frozen=True)
class SkippedSignal:
    message: str = ""


@dataclass(frozen=True)
class ProviderFailure:
    message: str = ""


ProviderOutcome = typing.Union[
    ProvidedData, IncompleteSignal, SkippedSignal, ProviderFailure
]
