import collections
import collections.abc
import datetime
import decimal
import inspect
import logging
import types
import typing

from wsdlgen.errors import ReflectionError

logger = logging.getLogger(__name__)

Parameter = collections.namedtuple('Parameter', ['name', 'type', 'optional'])
Prototype = collections.namedtuple('Prototype', ['parameters', 'return_type'])
OperationSignature = collections.namedtuple('OperationSignature', ['name', 'description', 'prototypes'])

BUILTIN_TYPE_NAMES = {
    int: 'int',
    float: 'float',
    str: 'string',
    bool: 'boolean',
    bytes: 'bytes',
    decimal.Decimal: 'decimal',
    datetime.datetime: 'datetime',
    datetime.date: 'date',
    datetime.time: 'time',
    list: 'array',
    tuple: 'array',
    set: 'array',
    frozenset: 'array',
    dict: 'struct',
    object: 'mixed',
}

_SEQUENCE_ORIGINS = (
    list, set, frozenset,
    collections.abc.Iterable, collections.abc.Collection,
    collections.abc.Sequence, collections.abc.MutableSequence,
    collections.abc.Set, collections.abc.MutableSet,
)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)
_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


class Reflection:
    """Reflects Python callables into operation signatures.

    Classes met while converting annotations are recorded in ``classmap``
    under the type name they were given, so complex type strategies can find
    them again when the type is resolved.
    """

    def __init__(self, classmap=None):
        self.classmap = dict(classmap or {})

    def class_for(self, type_name):
        return self.classmap.get(type_name)

    @staticmethod
    def class_name(cls):
        return cls.__qualname__.rpartition('<locals>.')[2]

    def reflect_class(self, cls):
        if not inspect.isclass(cls):
            raise ReflectionError(f"{cls!r} is not a class.")

        signatures = []
        for name, member in self._public_members(cls):
            if isinstance(member, staticmethod):
                signatures.append(self._signature(member.__func__, name, bound=False))
            elif isinstance(member, classmethod):
                signatures.append(self._signature(member.__func__, name, bound=True))
            elif inspect.isfunction(member):
                signatures.append(self._signature(member, name, bound=True))
        return signatures

    def reflect_function(self, function):
        name = getattr(function, '__name__', None)
        if not callable(function) or name is None:
            raise ReflectionError(f"{function!r} is not a named callable.")
        return self._signature(function, name, bound=False)

    def properties(self, cls):
        props = []
        for name, hint in self._type_hints(cls).items():
            if name.startswith('_'):
                continue
            if hint is typing.ClassVar or typing.get_origin(hint) is typing.ClassVar:
                continue
            props.append((name, self.type_name(hint)))
        return props

    def type_name(self, annotation, default='mixed'):
        if annotation is inspect.Parameter.empty:
            return default
        if annotation is None or annotation is type(None):
            return 'void'
        if annotation is typing.Any:
            return 'mixed'

        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)
        if origin is typing.Annotated:
            return self.type_name(args[0], default)
        if origin is typing.Union or origin is types.UnionType:
            members = [arg for arg in args if arg is not type(None)]
            if len(members) == 1:
                return self.type_name(members[0], default)
            return 'mixed'
        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return self.type_name(args[0]) + '[]'
            return 'array'
        if origin in _SEQUENCE_ORIGINS:
            if args:
                return self.type_name(args[0]) + '[]'
            return 'array'
        if origin in _MAPPING_ORIGINS:
            return 'struct'

        if inspect.isclass(annotation) and origin is None:
            if annotation in BUILTIN_TYPE_NAMES:
                return BUILTIN_TYPE_NAMES[annotation]
            return self._register_class(annotation)
        raise ReflectionError(f"Unsupported annotation {annotation!r}.")

    def _register_class(self, cls):
        name = self.class_name(cls)
        known = self.classmap.setdefault(name, cls)
        if known is not cls:
            raise ReflectionError(
                f"Type name '{name}' is ambiguous: {known.__module__}.{name} "
                f"and {cls.__module__}.{name}.")
        return name

    def _public_members(self, cls):
        # base classes first, most derived implementation wins
        members = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for name, member in vars(klass).items():
                if not name.startswith('_'):
                    members[name] = member
        return members.items()

    def _signature(self, function, name, bound):
        shapes = typing.get_overloads(function) or [function]
        prototypes = []
        for shape in shapes:
            prototypes.extend(self._prototypes(shape, bound))
        logger.debug("Reflected %s with %d prototype(s)", name, len(prototypes))
        return OperationSignature(name, self._description(function), tuple(prototypes))

    def _prototypes(self, function, bound):
        hints = self._type_hints(function)
        try:
            parameters = list(inspect.signature(function).parameters.values())
        except (TypeError, ValueError) as exc:
            raise ReflectionError(f"Cannot read the signature of {function!r}: {exc}") from exc
        if bound:
            parameters = parameters[1:]

        params = []
        for param in parameters:
            if param.kind in _SKIPPED_KINDS:
                continue
            params.append(Parameter(
                param.name,
                self.type_name(hints.get(param.name, inspect.Parameter.empty)),
                param.default is not inspect.Parameter.empty,
            ))
        return_type = self.type_name(hints.get('return', inspect.Parameter.empty), default='void')

        # one prototype per number of trailing optional arguments given
        first_optional = next((i for i, param in enumerate(params) if param.optional), len(params))
        return [Prototype(tuple(params[:count]), return_type)
                for count in range(first_optional, len(params) + 1)]

    def _type_hints(self, obj):
        try:
            return typing.get_type_hints(obj)
        except (NameError, SyntaxError, TypeError) as exc:
            raise ReflectionError(f"Cannot resolve the annotations of {obj!r}: {exc}") from exc

    @staticmethod
    def _description(function):
        doc = inspect.getdoc(function) or ''
        return doc.split('\n\n', 1)[0].strip()
