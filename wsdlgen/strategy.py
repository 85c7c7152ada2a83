"""Complex type strategies.

A strategy maps a type name that is not a schema primitive to a qualified
reference (``tns:Customer``, ``tns:ArrayOfCustomer``) and appends the schema
fragments it needs to the document it is bound to. Every fragment is emitted
once per document; the type table kept by the document is the only place
strategies record what they already generated.
"""

import logging
import re

from lxml import etree

from wsdlgen.errors import ConfigurationError, SchemaGenerationError, StateError
from wsdlgen.namespaces import NSMAP, WSDL_NS, qname

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r'[.\\/:]+')
_NCNAME = re.compile(r'^[A-Za-z_][\w\-]*$')
_TYPE_EXPRESSION = re.compile(r'^([\\/]?[A-Za-z_][\w.\\/:]*)((?:\[\])*)$')


def translate_type(type_name):
    """Turn a (possibly namespaced) type name into an XML-safe identifier."""
    translated = _SEPARATORS.sub('_', type_name.strip().lstrip('.\\/:'))
    if not _NCNAME.match(translated):
        raise SchemaGenerationError(f"Type name '{type_name}' cannot be used as an XML name.")
    return translated


def parse_type(type_name):
    """Split ``Invoice[][]`` into ``('Invoice', 2)``."""
    match = _TYPE_EXPRESSION.match(type_name.strip())
    if match is None:
        raise SchemaGenerationError(f"Malformed type expression '{type_name}'.")
    return match.group(1), len(match.group(2)) // 2


def ucfirst(value):
    return value[:1].upper() + value[1:]


class ComplexTypeStrategy:

    context = None

    def set_context(self, context):
        self.context = context

    def get_context(self):
        if self.context is None:
            raise StateError(f"{type(self).__name__} is not bound to a WSDL document.")
        return self.context

    def resolve(self, type_name):
        raise NotImplementedError

    def registered_types(self):
        return set(self.get_context().get_types())

    def _add_complex_type(self, name, type_name):
        schema = self.get_context().get_schema()
        if schema.find(f"xsd:complexType[@name='{name}']", namespaces=NSMAP) is not None:
            raise SchemaGenerationError(
                f"Type '{type_name}' maps to complex type '{name}', which another type already uses.")
        complex_type = etree.SubElement(schema, qname('xsd:complexType'))
        complex_type.set('name', name)
        return complex_type


class AnyType(ComplexTypeStrategy):

    def resolve(self, type_name):
        parse_type(type_name)
        return 'xsd:anyType'


class DefaultComplexType(ComplexTypeStrategy):
    """Flat strategy: one ``xsd:all`` complex type per known class."""

    def resolve(self, type_name):
        singular, depth = parse_type(type_name)
        context = self.get_context()

        registered = context.get_registered_type(type_name)
        if registered is not None:
            return registered
        if depth:
            raise SchemaGenerationError(
                f"Cannot map array type '{type_name}' with {type(self).__name__}; "
                "use an array strategy such as 'sequence'.")

        cls = context.reflection.class_for(singular)
        if cls is None:
            raise SchemaGenerationError(
                f"Cannot add complex type '{type_name}': no class is known under that name.")

        name = translate_type(singular)
        reference = 'tns:' + name
        complex_type = self._add_complex_type(name, type_name)
        # registered before walking attributes so self references terminate
        context.add_type(type_name, reference)

        members = etree.SubElement(complex_type, qname('xsd:all'))
        for attr_name, attr_type in context.reflection.properties(cls):
            element = etree.SubElement(members, qname('xsd:element'))
            element.set('name', attr_name)
            element.set('type', context.get_type(attr_type))

        logger.debug("Added complex type %s for class %s", name, cls.__qualname__)
        return reference


class ArrayOfTypeSequence(DefaultComplexType):
    """Nested strategy: ``T[][]`` becomes ``ArrayOfArrayOfT`` wrapping ``ArrayOfT``."""

    def resolve(self, type_name):
        singular, depth = parse_type(type_name)
        if depth == 0:
            return super().resolve(type_name)

        context = self.get_context()
        registered = context.get_registered_type(type_name)
        if registered is not None:
            return registered

        for level in range(1, depth + 1):
            array_name = self._array_type_name(singular, level)
            child_type = self._type_for_level(singular, level - 1)
            self._add_sequence_type(array_name, child_type, singular + '[]' * level)

        # the full expression is registered on its own so it short-circuits next time
        reference = 'tns:' + array_name
        context.add_type(type_name, reference)
        return reference

    def _array_type_name(self, singular, level):
        return 'ArrayOf' * level + ucfirst(translate_type(singular))

    def _type_for_level(self, singular, level):
        if level == 0:
            item_type = self.get_context().get_type(singular)
            if not item_type:
                raise SchemaGenerationError(f"Arrays of '{singular}' cannot be described.")
            return item_type
        return 'tns:' + self._array_type_name(singular, level)

    def _add_sequence_type(self, array_name, child_type, array_type_name):
        context = self.get_context()
        if context.get_registered_type(array_type_name) is not None:
            return

        complex_type = self._add_complex_type(array_name, array_type_name)
        sequence = etree.SubElement(complex_type, qname('xsd:sequence'))
        element = etree.SubElement(sequence, qname('xsd:element'))
        element.set('name', 'item')
        element.set('type', child_type)
        element.set('minOccurs', '0')
        element.set('maxOccurs', 'unbounded')

        context.add_type(array_type_name, 'tns:' + array_name)
        logger.debug("Added sequence type %s with items of %s", array_name, child_type)


class ArrayOfTypeComplex(DefaultComplexType):
    """SOAP-encoded arrays restricting ``soap-enc:Array``, one level deep only."""

    def resolve(self, type_name):
        singular, depth = parse_type(type_name)
        if depth == 0:
            return super().resolve(type_name)
        if depth > 1:
            raise SchemaGenerationError(
                f"{type(self).__name__} cannot describe nested array '{type_name}'; use 'sequence'.")

        context = self.get_context()
        registered = context.get_registered_type(type_name)
        if registered is not None:
            return registered

        item_type = context.get_type(singular)
        if not item_type:
            raise SchemaGenerationError(f"Arrays of '{singular}' cannot be described.")
        name = 'ArrayOf' + ucfirst(translate_type(singular))

        complex_type = self._add_complex_type(name, type_name)
        content = etree.SubElement(complex_type, qname('xsd:complexContent'))
        restriction = etree.SubElement(content, qname('xsd:restriction'))
        restriction.set('base', 'soap-enc:Array')
        attribute = etree.SubElement(restriction, qname('xsd:attribute'))
        attribute.set('ref', 'soap-enc:arrayType')
        attribute.set('{%s}arrayType' % WSDL_NS, item_type + '[]')

        reference = 'tns:' + name
        context.add_type(type_name, reference)
        logger.debug("Added soap-enc array type %s with items of %s", name, item_type)
        return reference


STRATEGIES = {
    'any': AnyType,
    'default': DefaultComplexType,
    'sequence': ArrayOfTypeSequence,
    'complex': ArrayOfTypeComplex,
}


def get_strategy(strategy):
    if strategy is True:
        return DefaultComplexType()
    if strategy is False:
        return AnyType()
    if isinstance(strategy, ComplexTypeStrategy):
        return strategy
    if isinstance(strategy, type) and issubclass(strategy, ComplexTypeStrategy):
        return strategy()
    if isinstance(strategy, str):
        for name, cls in STRATEGIES.items():
            if strategy.lower() in (name, cls.__name__.lower()):
                return cls()
        raise ConfigurationError(
            f"Unknown complex type strategy '{strategy}', expected one of {', '.join(STRATEGIES)}.")
    raise ConfigurationError(f"Invalid complex type strategy {strategy!r}.")
