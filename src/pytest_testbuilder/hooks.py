import pytest
import typing

if typing.TYPE_CHECKING:
    from pytest_testbuilder.metadata import MetadataResolver


@pytest.hookspec(firstresult=True)
def pytest_testbuilder_resolver(
    config: pytest.Config,
) -> typing.Optional["MetadataResolver"]:
    """Provide the metadata resolver used when building test classes."""
