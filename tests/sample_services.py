import dataclasses
import typing


@dataclasses.dataclass
class Address:
    street: str
    city: str


@dataclasses.dataclass
class Customer:
    name: str
    age: int
    address: Address


class Node:
    value: int
    children: 'list[Node]'
    _parent: 'Node'
    kind: typing.ClassVar[str] = 'node'


class Billing:
    """Billing endpoint."""

    def getList(self, customers: list[Customer]) -> list[list[Customer]]:
        """Group customers by city.

        Returns one list per city.
        """
        return [customers]

    def ping(self) -> None:
        pass

    def _hidden(self):
        pass


class BaseService:

    def status(self) -> str:
        return 'ok'

    def version(self) -> int:
        return 1


class ExtendedService(BaseService):

    def version(self) -> int:
        return 2

    @staticmethod
    def echo(message: str) -> str:
        return message

    @classmethod
    def create(cls, label: str) -> bool:
        return True


class EmptyService:
    """Nothing public to describe."""

    def _internal(self) -> int:
        return 0


class BrokenReports:

    def summary(self, values: list[None]) -> int:
        return 0


def add(a: int, b: int) -> int:
    """Add two numbers."""
    return a + b


def ping() -> None:
    pass


def greet(name: str, greeting: str = 'Hello') -> str:
    return f'{greeting} {name}'


def untyped(value, *args, **kwargs):
    return value


def tally(groups: list[list[int]]) -> int:
    return sum(len(group) for group in groups)


def unresolvable(value: 'DoesNotExist') -> int:  # noqa: F821
    return 0


@typing.overload
def scale(value: int) -> int:
    ...


@typing.overload
def scale(value: float, factor: float) -> float:
    ...


def scale(value, factor=2):
    return value * factor
