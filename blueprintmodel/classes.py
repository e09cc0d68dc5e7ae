"""Declare blueprints with class syntax.

Subclasses of BlueprintObject are turned into blueprints when the class is
created. Fields are declared with the Field data descriptor and behaviors are
ordinary (public) methods::

    class Hero(BlueprintObject):
        name = Field()
        level = Field()

        def __init__(self, name, level):
            self.name = name
            self.level = level

        def greet(self):
            return f'{self.name} says hello.'

    class Mage(Hero):
        spell = Field()

        def __init__(self, name, level, spell):
            # Chain to the parent initializer.
            super().__init__(name, level)
            self.spell = spell

The generated Blueprint is available as ``Hero.blueprint`` and is registered in
the current registry under the class's module and qualified name (or under
the *blueprint_name* class keyword argument).

Classes that do not define ``__init__`` get one that assigns positional
arguments to fields in declaration order, passing the leading arguments to the
parent initializer.
"""
from __future__ import annotations

__all__ = ['BlueprintObject', 'Field']

import copy
import functools
import inspect
import logging
import typing

from blueprintmodel.blueprint import Blueprint
from blueprintmodel.blueprint import InstanceState
from blueprintmodel.blueprint import STATE_ATTRIBUTE
from blueprintmodel.blueprint import assign_field
from blueprintmodel.blueprint import read_field
from blueprintmodel.blueprint import state_of
from blueprintmodel.blueprint import verify
from blueprintmodel.exceptions import APIError
from blueprintmodel.exceptions import BehaviorNotFoundError
from blueprintmodel.exceptions import ProtocolError

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))


class Field:
    """Data Descriptor for blueprint fields."""
    # Ref: https://docs.python.org/3/reference/datamodel.html#implementing-descriptors

    def __init__(self, doc: str = None):
        # Attribute name associated with this field. Will be discovered with __set_name__ during
        # creation of the class that will own this descriptor.
        self.name = None
        if doc is not None:
            self.__doc__ = str(doc)

    def __repr__(self):
        return '<{} {}>'.format(self.__class__.__name__, self.name)

    def __set_name__(self, owner, name):
        # Called by type.__new__ during class creation, before owner.__init_subclass__.
        if self.name is not None and self.name != name:
            raise ProtocolError(f'Field {self.name!r} cannot be reused as {name!r}.')
        self.name = name

    def __get__(self, instance, owner):
        # Note that instance==None when called through the *owner* (as a class attribute).
        if instance is None:
            return self
        return read_field(instance, self.name)

    def __set__(self, instance, value):
        assign_field(instance, self.name, value)

    def __delete__(self, instance):
        raise ProtocolError(f'Fields cannot be removed from {instance!r}.')


def _generated_init(cls, parameters: typing.Sequence[str]):
    def __init__(self, *args, **kwargs):
        cls.blueprint._initialize_fields(self, *args, **kwargs)
    __init__.__qualname__ = f'{cls.__qualname__}.__init__'
    # Describe the positional arguments for inspect.signature() and Blueprint.parameters().
    __init__.__signature__ = inspect.Signature(
        [inspect.Parameter(name, inspect.Parameter.POSITIONAL_ONLY) for name in ('_instance', *parameters)])
    return __init__


def _checked_init(cls, init):
    """Wrap a class's __init__ to record and verify initialization.

    The blueprint for *cls* is marked as initialized when *init* returns. When
    *cls* is the class being instantiated (the outermost __init__), the whole
    chain is verified.
    """
    @functools.wraps(init)
    def __init__(self, *args, **kwargs):
        init(self, *args, **kwargs)
        state_of(self).initialized.add(cls.blueprint)
        if type(self) is cls:
            verify(self)
    return __init__


class BlueprintObject:
    """Base class for blueprints declared with class syntax.

    BlueprintObject itself is not a blueprint and cannot be instantiated.
    """
    blueprint: typing.ClassVar[Blueprint]

    def __init_subclass__(cls, blueprint_name=None, registry=None, **kwargs):
        """Generate and register the Blueprint for a new subclass.

        Note that this is called _after_ type.__new__ has collected and called
        __set_name__ for descriptor objects found in the new class namespace.
        Reference https://docs.python.org/3/reference/datamodel.html#creating-the-class-object
        """
        super().__init_subclass__(**kwargs)
        if len(cls.__bases__) != 1 or not issubclass(cls.__bases__[0], BlueprintObject):
            raise ProtocolError(f'{cls.__qualname__}: blueprints support single inheritance only.')
        if 'blueprint' in cls.__dict__:
            raise ProtocolError(f'{cls.__qualname__}: *blueprint* is a reserved attribute.')
        base = cls.__bases__[0]
        parent = base.blueprint if base is not BlueprintObject else None

        fields = [name for name, value in cls.__dict__.items() if isinstance(value, Field)]
        behaviors = {name: value for name, value in cls.__dict__.items()
                     if inspect.isfunction(value) and not name.startswith('_')}

        if '__init__' not in cls.__dict__:
            inherited = parent.parameters() if parent is not None else ()
            if inherited is None:
                raise ProtocolError(
                    f'{cls.__qualname__}: {base.__qualname__}.__init__ does not take a fixed list of positional '
                    f'arguments. Define __init__ and chain to it.')
            cls.__init__ = _generated_init(cls, inherited + tuple(fields))
        cls.__init__ = _checked_init(cls, cls.__dict__['__init__'])

        cls.blueprint = Blueprint(cls if blueprint_name is None else blueprint_name,
                                  fields,
                                  parent=parent,
                                  behaviors=behaviors,
                                  initializer=cls.__init__,
                                  factory=cls,
                                  registry=registry)
        # The class body is the complete declaration.
        cls.blueprint.seal()

    def __new__(cls, *args, **kwargs):
        if cls is BlueprintObject:
            raise APIError('BlueprintObject is a base class for blueprints. Subclass it.')
        self = super().__new__(cls)
        object.__setattr__(self, STATE_ATTRIBUTE, InstanceState(cls.blueprint))
        return self

    def __getattr__(self, name):
        # Only called when regular attribute lookup fails, including when a
        # Field descriptor raises InitializationError for an unset field.
        if name.startswith('_'):
            raise AttributeError(name)
        blueprint = type(self).blueprint
        if name in blueprint.fields:
            return read_field(self, name)
        raise BehaviorNotFoundError(blueprint.name, name)

    def __setattr__(self, name, value):
        if not name.startswith('_') and name not in type(self).blueprint.fields:
            raise ProtocolError(f'{type(self).blueprint.name} has no field {name!r}.')
        super().__setattr__(name, value)

    def __copy__(self):
        cls = type(self)
        clone = cls.__new__(cls)
        clone.__dict__.update((key, value) for key, value in self.__dict__.items() if key != STATE_ATTRIBUTE)
        object.__setattr__(clone, STATE_ATTRIBUTE, state_of(self).copy())
        return clone

    def __deepcopy__(self, memo):
        cls = type(self)
        clone = cls.__new__(cls)
        memo[id(self)] = clone
        for key, value in self.__dict__.items():
            if key != STATE_ATTRIBUTE:
                clone.__dict__[key] = copy.deepcopy(value, memo)
        object.__setattr__(clone, STATE_ATTRIBUTE, state_of(self).copy(memo))
        return clone

    def __repr__(self):
        state = state_of(self)
        values = ', '.join(f'{name}={state.values[name]!r}'
                           for name in state.blueprint.fields if name in state.values)
        return f'{state.blueprint.name}({values})'
