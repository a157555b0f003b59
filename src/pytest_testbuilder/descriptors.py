import abc
import inspect
import typing
from abc import abstractmethod

_registered_descriptors: typing.Dict[type, "ClassDescriptor"] = {}


class ClassDescriptor(metaclass=abc.ABCMeta):
    def __init__(self, test_class: type) -> None:
        self.test_class = test_class

    @property
    def name(self) -> str:
        return self.test_class.__qualname__

    @abstractmethod
    def is_instantiable(self) -> bool: ...

    @abstractmethod
    def constructor_parameter_count(self) -> typing.Optional[int]:
        """Number of declared constructor parameters, None without a constructor."""

    @abstractmethod
    def instantiate(self, args: typing.Sequence[typing.Any]) -> typing.Any: ...


class ReflectionClassDescriptor(ClassDescriptor):
    def is_instantiable(self) -> bool:
        if inspect.isabstract(self.test_class):
            return False
        # typing.Protocol classes refuse instantiation
        return not getattr(self.test_class, "_is_protocol", False)

    def constructor_parameter_count(self) -> typing.Optional[int]:
        init = self.test_class.__init__
        if init is object.__init__:
            return None

        parameters = list(inspect.signature(init).parameters.values())[1:]
        return sum(
            1 for parameter in parameters if parameter.kind != parameter.VAR_KEYWORD
        )

    def instantiate(self, args: typing.Sequence[typing.Any]) -> typing.Any:
        return self.test_class(*args)


DESCRIPTOR_TYPE = typing.TypeVar("DESCRIPTOR_TYPE", bound=type[ClassDescriptor])


def register_descriptor(test_class: type):
    """Decorator for adding a custom descriptor for one test class

    e.g.
    @register_descriptor(MyTest)
    class MyTestDescriptor(ReflectionClassDescriptor):
        def instantiate(self, args):
            return MyTest.create(*args)
    """

    def decorator(d: DESCRIPTOR_TYPE) -> DESCRIPTOR_TYPE:
        _registered_descriptors[test_class] = d(test_class)
        return d

    return decorator


def get_descriptor(test_class: type) -> ClassDescriptor:
    if test_class in _registered_descriptors:
        return _registered_descriptors[test_class]
    return ReflectionClassDescriptor(test_class)
