"""Identify blueprints by name.

Blueprint names are nested, period-delimited names, such as ``Hero`` or
``blueprintmodel.walkthrough.Mage``. A TypeIdentifier normalizes the several
ways a name may be written (strings, sequences of strings, classes, and other
identifiers) and gives the name a strong identity as an RFC 4122 UUID5 in the
blueprintmodel namespace. Equal names produce equal (and equally hashed)
identifiers, so identifiers are suitable registry keys.
"""
from __future__ import annotations

__all__ = ['Identifier', 'NamedIdentifier', 'TypeIdentifier', 'TypeRepr']

import abc
import logging
import typing
import uuid

from blueprintmodel.exceptions import APIError

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))

NAMESPACE_BLUEPRINTMODEL: uuid.UUID = uuid.uuid5(uuid.NAMESPACE_DNS, 'blueprintmodel.invalid')

TypeRepr = typing.Union['NamedIdentifier', typing.Sequence[str], type, str]
"""Represent a blueprint name.

A TypeIdentifier may be constructed from several representations, including
period-delimited strings, sequences of strings, Python classes,
and NamedIdentifier instances.
"""

IdentifierT = typing.TypeVar('IdentifierT', bound='Identifier')


class Identifier(abc.ABC):
    """Identifiers provide a consistent bytes representation of their identity.

    Note that the identity (and the value returned by self.bytes()) must be immutable for
    the life of the object.
    """

    @abc.abstractmethod
    def bytes(self) -> bytes:
        raise NotImplementedError

    @abc.abstractmethod
    def __str__(self) -> str:
        """Represent the identifier in a form suitable for records and display."""
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def copy_from(cls: typing.Type[IdentifierT], obj) -> IdentifierT:
        """Produce a new instance of the Identifier from another object.

        Note that copies of Identifiers must compare equal.
        """
        raise NotImplementedError

    def encode(self):
        """Get a canonical encoding of the identifier as a native Python object.

        By default, the string representation (self.__str__()) is used.
        """
        return str(self)

    def __eq__(self, other):
        return isinstance(other, self.__class__) and other.bytes() == self.bytes()

    def __hash__(self) -> int:
        # Note that the result of the `hash()` built-in is truncated to
        # the size of a `Py_ssize_t`, but two objects that compare equal must
        # return the same value for `__hash__()`, so we return the full value.
        return self.__index__()

    def __bytes__(self) -> bytes:
        return bytes(self.bytes())

    def __index__(self) -> int:
        return int.from_bytes(self.bytes(), 'big')


class NamedIdentifier(Identifier):
    """A name with strong identity semantics, represented with a UUID."""

    def __init__(self, nested_name: typing.Sequence[str]):
        try:
            if isinstance(nested_name, (str, bytes)):
                raise TypeError('Wrong kind of iterable.')
            self._name_tuple = tuple(str(part) for part in nested_name)
        except TypeError as e:
            raise TypeError(f'Could not construct {self.__class__.__name__} from {repr(nested_name)}') from e
        if len(self._name_tuple) == 0 or not all(self._name_tuple):
            raise APIError(f'Invalid name for {self.__class__.__name__}: {nested_name!r}')
        self._data = uuid.uuid5(NAMESPACE_BLUEPRINTMODEL, '.'.join(self._name_tuple))

    def bytes(self):
        return self._data.bytes

    def __str__(self) -> str:
        return '.'.join(self._name_tuple)

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__, repr(self._name_tuple))

    def encode(self) -> typing.List[str]:
        return list(self._name_tuple)

    @classmethod
    def copy_from(cls, obj) -> 'NamedIdentifier':
        if isinstance(obj, NamedIdentifier):
            return cls(obj._name_tuple)
        return cls(obj)


class TypeIdentifier(NamedIdentifier):
    """Identify a blueprint by its nested name."""

    def name(self) -> typing.Tuple[str, ...]:
        return self._name_tuple

    def short_name(self) -> str:
        """The final element of the nested name."""
        return self._name_tuple[-1]

    def namespace(self) -> typing.Tuple[str, ...]:
        return self._name_tuple[0:-1]

    @classmethod
    def copy_from(cls, typeid: TypeRepr) -> 'TypeIdentifier':
        """Create a new TypeIdentifier instance describing the same blueprint as the source.

        Raises:
            TypeError if *typeid* has no recognizable name.
        """
        if isinstance(typeid, NamedIdentifier):
            return cls(typeid._name_tuple)
        if isinstance(typeid, (list, tuple)):
            return cls(typeid)
        if isinstance(typeid, type):
            # Note: local classes carry '<locals>' in their qualified name. That is
            # acceptable for identification within a process, but not importable.
            if typeid.__module__ is not None:
                fully_qualified_name = '.'.join((typeid.__module__, typeid.__qualname__))
            else:
                fully_qualified_name = str(typeid.__qualname__)
            return cls.copy_from(fully_qualified_name)
        if isinstance(typeid, str):
            return cls.copy_from(tuple(typeid.split('.')))
        raise TypeError(f'Cannot interpret {typeid!r} as a blueprint name.')
