"""Inspect blueprint instances.

Provide a console rendering of an instance's field values and delegation
chain, and an encoding of instances as basic Python data that is easily
serialized.

The rendering mirrors what a developer would print to explore an object::

    Mage {name: 'Lejon', level: 2, spell: 'Magic Missile'}
      blueprint: Mage
      prototype: Hero
      behaviors: greet (Hero)

The encoding of an instance is a dict with the keys *type* (the nested
blueprint name), *fields* (field values in declaration order), and *chain*
(blueprint names along the delegation chain, nearest first).

Field values are encoded with :py:data:`encode_value`, looking inside lists,
tuples and dicts. Additional value types can be registered with
``encode_value.register(dtype=..., handler=...)``.
"""
from __future__ import annotations

__all__ = ['compact_json', 'encode', 'encode_data', 'encode_value', 'render']

import json
import logging
import os
import typing
import weakref

from blueprintmodel.blueprint import Instance
from blueprintmodel.blueprint import blueprint_of
from blueprintmodel.blueprint import fields_of
from blueprintmodel.classes import BlueprintObject
from blueprintmodel.exceptions import ProtocolError

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))

BaseEncodable = typing.Union[str, int, float, bool, None, typing.Mapping, typing.Sequence]

json_base_encodable_types: typing.Tuple[type, ...] = (dict, list, tuple, str, int, float, bool, type(None))

DispatchT = typing.TypeVar('DispatchT')


class PythonEncoder:
    """Encode field values as basic Python data that is easily serialized.

    Suitable for the *default* argument of ``json.dumps()``, but note that it will
    only be used for objects that JSONEncoder does not already resolve.
    """
    # We use WeakKeyDictionary because the keys are likely to be classes,
    # and we don't intend to extend the life of the type objects (which might be temporary).
    _dispatchers: typing.ClassVar[typing.MutableMapping[
        typing.Type[DispatchT], typing.Callable[[DispatchT], BaseEncodable]]] = weakref.WeakKeyDictionary()

    @classmethod
    def register(cls, *, dtype: typing.Type[DispatchT], handler: typing.Callable[[DispatchT], BaseEncodable]):
        if not isinstance(dtype, type):
            raise TypeError('We use `isinstance(obj, dtype)` for dispatching, so *dtype* must be a `type` object.')
        if dtype in cls._dispatchers:
            raise ProtocolError(f'Encodable type {dtype} appears to be registered already.')
        cls._dispatchers[dtype] = handler

    @classmethod
    def unregister(cls, dtype: typing.Type[DispatchT]):
        del cls._dispatchers[dtype]

    @classmethod
    def encode(cls, obj) -> BaseEncodable:
        """Convert an object of a registered type to a representation as a basic Python object."""
        # Warning: we should be careful not to let objects unexpectedly match multiple entries.
        for dtype, dispatch in cls._dispatchers.items():
            if isinstance(obj, dtype):
                return dispatch(obj)
        if type(obj) in json_base_encodable_types:
            return obj
        raise TypeError(f'No registered dispatching for {repr(obj)}')

    def __call__(self, obj) -> BaseEncodable:
        return self.encode(obj)


def encode_data(value) -> BaseEncodable:
    """Encode a field value, including the contents of lists, tuples and dicts.

    Instances nested in containers are encoded as dicts, too. Tuples become
    lists and dict keys must already be strings.
    """
    if isinstance(value, (list, tuple)):
        return [encode_data(item) for item in value]
    if isinstance(value, dict):
        encoded = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f'Cannot encode mapping key {key!r}. Keys must be strings.')
            encoded[key] = encode_data(item)
        return encoded
    return encode_value(value)


def encode(obj) -> dict:
    """Encode an instance as a dict of basic Python data."""
    blueprint = blueprint_of(obj)
    return {
        'type': blueprint.identifier.encode(),
        'fields': {name: encode_data(value) for name, value in fields_of(obj).items()},
        'chain': [ancestor.name for ancestor in blueprint.lineage()]
    }


encode_value = PythonEncoder()
encode_value.register(dtype=bytes, handler=bytes.hex)
encode_value.register(dtype=os.PathLike, handler=os.fsdecode)
encode_value.register(dtype=Instance, handler=encode)
encode_value.register(dtype=BlueprintObject, handler=encode)


def compact_json(obj) -> str:
    """Produce the compact JSON string for an instance or encodable value."""
    if isinstance(obj, (Instance, BlueprintObject)):
        obj = encode(obj)
    string = json.dumps(obj,
                        default=encode_value,
                        ensure_ascii=True,
                        separators=(',', ':'),
                        sort_keys=True
                        )
    return string


def render(obj) -> str:
    """Describe an instance for the console.

    The first line shows the blueprint name and the field values. The
    following lines show the blueprint, its parent (if any), and each
    resolvable behavior with the blueprint that provides it.
    """
    blueprint = blueprint_of(obj)
    values = ', '.join(f'{name}: {value!r}' for name, value in fields_of(obj).items())
    lines = ['{} {{{}}}'.format(blueprint.name, values),
             f'  blueprint: {blueprint.name}']
    if blueprint.parent is not None:
        lines.append(f'  prototype: {blueprint.parent.name}')
    behaviors = blueprint.behaviors()
    if behaviors:
        lines.append('  behaviors: ' + ', '.join(f'{name} ({owner.name})'
                                                 for name, owner in sorted(behaviors.items())))
    return '\n'.join(lines)
