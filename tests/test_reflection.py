import collections.abc
import datetime
import decimal
import typing

import pytest

from wsdlgen.errors import ReflectionError
from wsdlgen.reflection import Parameter, Prototype, Reflection

import sample_services
from sample_services import Address, Billing, Customer, ExtendedService, Node


@pytest.mark.parametrize('annotation, expected', [
    (int, 'int'),
    (str, 'string'),
    (bool, 'boolean'),
    (float, 'float'),
    (bytes, 'bytes'),
    (decimal.Decimal, 'decimal'),
    (datetime.datetime, 'datetime'),
    (datetime.date, 'date'),
    (None, 'void'),
    (typing.Any, 'mixed'),
    (list, 'array'),
    (dict, 'struct'),
    (dict[str, int], 'struct'),
    (list[int], 'int[]'),
    (typing.List[typing.List[str]], 'string[][]'),
    (tuple[int, ...], 'int[]'),
    (tuple[int, str], 'array'),
    (typing.Optional[int], 'int'),
    (int | None, 'int'),
    (int | str, 'mixed'),
    (collections.abc.Sequence[float], 'float[]'),
    (typing.Annotated[int, 'units'], 'int'),
])
def test_type_name(annotation, expected):
    assert Reflection().type_name(annotation) == expected


def test_type_name_registers_classes():
    reflection = Reflection()

    assert reflection.type_name(list[list[Customer]]) == 'Customer[][]'
    assert reflection.class_for('Customer') is Customer
    assert reflection.class_for('Address') is None


def test_type_name_rejects_ambiguous_classes():
    reflection = Reflection()
    reflection.type_name(type('Duplicate', (), {}))

    with pytest.raises(ReflectionError):
        reflection.type_name(type('Duplicate', (), {}))


def test_type_name_rejects_unsupported_annotation():
    with pytest.raises(ReflectionError):
        Reflection().type_name(typing.Literal['a'])


def test_local_class_names():
    class Local:
        pass

    assert Reflection().type_name(Local) == 'Local'


def test_properties():
    reflection = Reflection()

    assert reflection.properties(Customer) == [('name', 'string'), ('age', 'int'), ('address', 'Address')]
    assert reflection.class_for('Address') is Address
    assert reflection.properties(Node) == [('value', 'int'), ('children', 'Node[]')]


def test_reflect_function():
    signature = Reflection().reflect_function(sample_services.add)

    assert signature.name == 'add'
    assert signature.description == 'Add two numbers.'
    assert signature.prototypes == (
        Prototype((Parameter('a', 'int', False), Parameter('b', 'int', False)), 'int'),
    )


def test_reflect_function_with_optional_parameters():
    signature = Reflection().reflect_function(sample_services.greet)

    name = Parameter('name', 'string', False)
    greeting = Parameter('greeting', 'string', True)
    assert signature.prototypes == (
        Prototype((name,), 'string'),
        Prototype((name, greeting), 'string'),
    )


def test_reflect_untyped_function():
    signature = Reflection().reflect_function(sample_services.untyped)

    assert signature.description == ''
    assert signature.prototypes == (Prototype((Parameter('value', 'mixed', False),), 'void'),)


def test_reflect_overloads():
    signature = Reflection().reflect_function(sample_services.scale)

    assert [len(p.parameters) for p in signature.prototypes] == [1, 2]
    assert signature.prototypes[1] == Prototype(
        (Parameter('value', 'float', False), Parameter('factor', 'float', False)), 'float')


def test_reflect_function_rejects_unresolvable_annotations():
    with pytest.raises(ReflectionError):
        Reflection().reflect_function(sample_services.unresolvable)


def test_reflect_function_rejects_non_callables():
    with pytest.raises(ReflectionError):
        Reflection().reflect_function('add')


def test_reflect_class():
    signatures = Reflection().reflect_class(Billing)

    assert [s.name for s in signatures] == ['getList', 'ping']
    get_list = signatures[0]
    assert get_list.description == 'Group customers by city.'
    assert get_list.prototypes == (
        Prototype((Parameter('customers', 'Customer[]', False),), 'Customer[][]'),
    )
    assert signatures[1].prototypes == (Prototype((), 'void'),)


def test_reflect_class_methods_in_declaration_order():
    signatures = Reflection().reflect_class(ExtendedService)

    assert [s.name for s in signatures] == ['status', 'version', 'echo', 'create']
    assert signatures[2].prototypes[0].parameters == (Parameter('message', 'string', False),)
    assert signatures[3].prototypes[0].parameters == (Parameter('label', 'string', False),)


def test_reflect_class_rejects_instances():
    with pytest.raises(ReflectionError):
        Reflection().reflect_class(Billing())
