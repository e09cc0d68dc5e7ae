"""Declare blueprints, extend them, and create instances.

A Blueprint is a named template with an ordered set of fields and a set of
behaviors (functions called with the invoking instance as their first
argument). A Blueprint may extend exactly one parent. The child inherits the
parent's fields, which are initialized by the parent's initializer, and the
parent's behaviors, unless the child shadows them.

Behavior resolution follows the delegation chain: the instance's own
blueprint, then its parent, then the grandparent, and so on. The first match
wins. The chain is fixed when a blueprint is sealed, so resolution uses a
lookup table built once per blueprint rather than a walk over mutable
prototypes.

Example::

    hero = declare('Hero', ('name', 'level'))

    @hero.attach
    def greet(self):
        return f'{self.name} says hello.'

    mage = hero.extend('Mage', ('spell',))

    hero2 = mage('Lejon', 2, 'Magic Missile')
    assert hero2.greet() == 'Lejon says hello.'

Lifecycle:
    A blueprint accepts new behaviors until it is sealed. It is sealed the first
    time it is instantiated or extended (or by calling :py:meth:`Blueprint.seal`).
    After that, its structure does not change.
"""
from __future__ import annotations

__all__ = ['Blueprint',
           'Instance',
           'blueprint_of',
           'declare',
           'fields_of',
           'instance_of']

import copy
import inspect
import keyword
import logging
import types
import typing

from blueprintmodel.exceptions import APIError
from blueprintmodel.exceptions import BehaviorNotFoundError
from blueprintmodel.exceptions import InitializationError
from blueprintmodel.exceptions import ProtocolError
from blueprintmodel.identifier import TypeIdentifier
from blueprintmodel.identifier import TypeRepr
from blueprintmodel.registry import Registry
from blueprintmodel.registry import get_registry

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))

Behavior = typing.Callable[..., typing.Any]
Initializer = typing.Callable[..., None]

# Attribute holding the InstanceState on objects created from blueprints.
STATE_ATTRIBUTE = '_blueprint_state'


def _check_name(name, kind: str) -> str:
    """Validate a field or behavior name.

    Names beginning with an underscore are reserved for the implementation.
    """
    if not isinstance(name, str):
        raise APIError(f'{kind} names must be strings. Got {name!r}.')
    if not name.isidentifier() or keyword.iskeyword(name):
        raise APIError(f'{name!r} is not a valid {kind} name.')
    if name.startswith('_'):
        raise APIError(f'{kind} names beginning with an underscore are reserved. Got {name!r}.')
    return name


class InstanceState:
    """Per-instance bookkeeping.

    Attributes:
        blueprint: the blueprint the instance was created from.
        values: field values, keyed by field name.
        initialized: blueprints in the delegation chain whose initializers have run.
    """
    __slots__ = ('blueprint', 'values', 'initialized')

    def __init__(self, blueprint: 'Blueprint'):
        self.blueprint = blueprint
        self.values: typing.Dict[str, typing.Any] = {}
        self.initialized: typing.Set['Blueprint'] = set()

    def copy(self, memo: dict = None) -> 'InstanceState':
        """Copy the bookkeeping for a new object.

        Field values are shared unless *memo* is given, in which case they are
        deep-copied with it.
        """
        clone = InstanceState(self.blueprint)
        if memo is None:
            clone.values = dict(self.values)
        else:
            clone.values = copy.deepcopy(self.values, memo)
        clone.initialized = set(self.initialized)
        return clone


def state_of(obj) -> InstanceState:
    # Do not format *obj* itself: its repr reads the state.
    try:
        state = object.__getattribute__(obj, STATE_ATTRIBUTE)
    except AttributeError:
        raise APIError(f'{type(obj).__name__} object was not created from a blueprint.') from None
    if not isinstance(state, InstanceState):
        raise APIError(f'{type(obj).__name__} object has corrupt blueprint state: {type(state).__name__}.')
    return state


def read_field(obj, name: str):
    state = state_of(obj)
    try:
        return state.values[name]
    except KeyError:
        raise InitializationError(f'{state.blueprint.name}.{name} is not initialized.') from None


def assign_field(obj, name: str, value):
    state = state_of(obj)
    if name not in state.blueprint.fields:
        raise ProtocolError(f'{state.blueprint.name} has no field {name!r}.')
    state.values[name] = value


def verify(obj):
    """Confirm that construction ran the whole initializer chain.

    Raises:
        InitializationError if an ancestor initializer did not run or a field was left unset.
    """
    state = state_of(obj)
    blueprint = state.blueprint
    skipped = [ancestor.name for ancestor in blueprint.lineage() if ancestor not in state.initialized]
    if skipped:
        raise InitializationError(
            '{} was constructed without running the initializer of {}.'.format(blueprint.name, ', '.join(skipped)))
    unset = [name for name in blueprint.fields if name not in state.values]
    if unset:
        raise InitializationError(
            '{} was constructed with uninitialized fields: {}.'.format(blueprint.name, ', '.join(unset)))


class Blueprint:
    """A named template for objects with declared fields and behaviors.

    Use :py:func:`declare` to create a root blueprint and :py:meth:`extend` to
    derive a child. Calling the blueprint creates an instance.

    Attributes:
        identifier: TypeIdentifier for the registered name.
        parent: the extended blueprint, or None.
        own_fields: field names declared by this blueprint.
        fields: all field names, inherited fields first.
    """

    def __init__(self,
                 name: TypeRepr,
                 fields: typing.Sequence[str] = (),
                 *,
                 parent: 'Blueprint' = None,
                 behaviors: typing.Mapping[str, Behavior] = None,
                 initializer: Initializer = None,
                 factory: typing.Callable = None,
                 registry: Registry = None):
        """Declare a blueprint and register it.

        Args:
            name: blueprint name (see :py:class:`~blueprintmodel.identifier.TypeIdentifier`).
            fields: names of the fields this blueprint adds.
            parent: blueprint to extend, if any.
            behaviors: mapping of behavior names to functions.
            initializer: optional ``initializer(instance, *args)`` replacing the default
                positional assignment. A child initializer must chain to the parent with
                ``parent.initialize(instance, ...)``.
            factory: callable that creates instances in place of the generic Instance.
                Used for blueprints generated from class definitions.
            registry: registry to declare into. Defaults to the current registry.

        Raises:
            ProtocolError: for a re-declared field, a field shadowing an inherited
                behavior, an extension of a class-syntax blueprint, or a default
                initializer that cannot pass arguments on to the parent initializer.

        The parent is sealed only once the declaration is accepted.
        """
        self.identifier = TypeIdentifier.copy_from(name)
        if parent is not None:
            if not isinstance(parent, Blueprint):
                raise APIError(f'Expected a Blueprint to extend. Got {parent!r}.')
            if parent._factory is not None and factory is None:
                raise ProtocolError(f'{parent.name} was declared with class syntax. Extend it by subclassing.')
            if initializer is None and parent.parameters() is None:
                raise ProtocolError(
                    f'The initializer of {parent.name} does not take a fixed list of positional arguments. '
                    f'{self.name} needs its own initializer.')
        self.parent = parent

        if isinstance(fields, (str, bytes)):
            raise APIError(f'*fields* must be a sequence of field names. Got {fields!r}.')
        own_fields = tuple(_check_name(field, 'field') for field in fields)
        inherited = parent.fields if parent is not None else ()
        for i, field in enumerate(own_fields):
            if field in own_fields[:i]:
                raise ProtocolError(f'Field {field!r} is declared more than once for {self.name}.')
            if field in inherited:
                raise ProtocolError(f'{self.name} cannot re-declare field {field!r} inherited from {parent.name}.')
            if parent is not None and field in parent._table():
                raise ProtocolError(f'Field {field!r} of {self.name} would hide an inherited behavior.')
        self.own_fields = own_fields
        self.fields = inherited + own_fields

        if initializer is not None and not callable(initializer):
            raise APIError('*initializer* must be callable.')
        self._initializer = initializer
        self._factory = factory
        self._behaviors: typing.Dict[str, Behavior] = {}
        self._resolution: typing.Optional[typing.Mapping[str, typing.Tuple[Blueprint, Behavior]]] = None

        if behaviors is not None:
            for behavior_name, function in behaviors.items():
                self.attach(behavior_name, function)

        if registry is None:
            registry = get_registry()
        if self.identifier in registry:
            raise ProtocolError(f'Blueprint {self.identifier} appears to be registered already.')
        if parent is not None:
            parent.seal()
        registry.register(self)
        self.registry = registry
        logger.debug('Declared {} with fields {}{}.'.format(
            self.identifier,
            self.fields,
            ' extending ' + str(parent.identifier) if parent is not None else ''))

    @property
    def name(self) -> str:
        return self.identifier.short_name()

    def __repr__(self):
        return '<{} {}>'.format(self.__class__.__name__, self.identifier)

    @property
    def sealed(self) -> bool:
        return self._resolution is not None

    def seal(self):
        """Fix the structure of the blueprint and build its resolution table.

        Sealing is idempotent.
        """
        if self._resolution is None:
            self._resolution = types.MappingProxyType(self._build_table())
            logger.debug(f'Sealed {self.identifier}.')

    def _build_table(self) -> typing.Dict[str, typing.Tuple['Blueprint', Behavior]]:
        if self.parent is not None:
            table = dict(self.parent._table())
        else:
            table = {}
        for name, function in self._behaviors.items():
            table[name] = (self, function)
        return table

    def _table(self) -> typing.Mapping[str, typing.Tuple['Blueprint', Behavior]]:
        if self._resolution is not None:
            return self._resolution
        return self._build_table()

    def attach(self, name, function: Behavior = None):
        """Attach a behavior to the blueprint.

        May be used as a decorator, with or without an explicit name::

            @hero.attach
            def greet(self):
                ...

            @hero.attach('introduce')
            def _(self):
                ...

        Raises:
            ProtocolError: if the blueprint is sealed, the name is already attached
                to this blueprint, or the name belongs to a field.
        """
        if function is None:
            if callable(name):
                function = name
                name = function.__name__
            else:
                def decorator(function: Behavior) -> Behavior:
                    self.attach(name, function)
                    return function
                return decorator
        _check_name(name, 'behavior')
        if not callable(function):
            raise APIError(f'Behavior {name!r} must be callable.')
        if self.sealed:
            raise ProtocolError(f'{self.name} is sealed. Cannot attach {name!r}.')
        if name in self._behaviors:
            raise ProtocolError(f'{self.name} already has a behavior named {name!r}.')
        if name in self.fields:
            raise ProtocolError(f'{self.name} has a field named {name!r}.')
        logger.debug(f'Attaching {name} to {self.identifier}.')
        self._behaviors[name] = function
        return function

    def extend(self,
               name: TypeRepr,
               fields: typing.Sequence[str] = (),
               *,
               behaviors: typing.Mapping[str, Behavior] = None,
               initializer: Initializer = None,
               registry: Registry = None) -> 'Blueprint':
        """Declare a child blueprint with this blueprint as its parent.

        The child is declared in the same registry as the parent unless *registry* is given.
        """
        if registry is None:
            registry = self.registry
        return Blueprint(name,
                         fields,
                         parent=self,
                         behaviors=behaviors,
                         initializer=initializer,
                         registry=registry)

    def lineage(self) -> typing.Tuple['Blueprint', ...]:
        """The delegation chain, starting with this blueprint and ending with the root."""
        chain = []
        blueprint = self
        while blueprint is not None:
            chain.append(blueprint)
            blueprint = blueprint.parent
        return tuple(chain)

    def is_a(self, other: 'Blueprint') -> bool:
        """Whether *other* is this blueprint or one of its ancestors."""
        return other in self.lineage()

    @property
    def own_behaviors(self) -> typing.Tuple[str, ...]:
        return tuple(self._behaviors)

    def behaviors(self) -> typing.Dict[str, 'Blueprint']:
        """Map each resolvable behavior name to the blueprint providing it."""
        return {name: owner for name, (owner, function) in self._table().items()}

    def _lookup(self, name: str) -> typing.Tuple['Blueprint', Behavior]:
        try:
            return self._table()[name]
        except KeyError:
            raise BehaviorNotFoundError(self.name, name) from None

    def behavior(self, name: str) -> Behavior:
        """Get the unbound function that *name* resolves to, starting from this blueprint.

        Resolving from an ancestor allows a shadowing behavior to call the
        version it shadows::

            def greet(self):
                return hero.behavior('greet')(self) + ' Beware!'

        Raises:
            BehaviorNotFoundError if no blueprint in the chain provides *name*.
        """
        return self._lookup(name)[1]

    def provider(self, name: str) -> 'Blueprint':
        """Get the blueprint whose version of *name* is used by instances of this blueprint."""
        return self._lookup(name)[0]

    def invoke(self, instance, name: str, *args, **kwargs):
        """Call behavior *name* on *instance*, resolving from this blueprint.

        *instance* must have been created from this blueprint or a descendant.
        """
        if not instance_of(instance, self):
            raise APIError(f'{instance!r} is not an instance of {self.name}.')
        return self.behavior(name)(instance, *args, **kwargs)

    def initialize(self, instance, *args, **kwargs):
        """Run this blueprint's initializer on *instance*.

        This is how a child initializer chains to its parent initializer.
        """
        if not instance_of(instance, self):
            raise APIError(f'Cannot initialize {instance!r} as {self.name}.')
        if self._initializer is None:
            self._initialize_fields(instance, *args, **kwargs)
        else:
            self._initializer(instance, *args, **kwargs)
        state_of(instance).initialized.add(self)

    def parameters(self) -> typing.Optional[typing.Tuple[str, ...]]:
        """Names of the positional arguments the initializer takes.

        The default initializer takes the parent's parameters followed by the
        own fields. A custom initializer is described by its signature, after
        the instance argument. Returns None if the initializer does not take a
        fixed list of required positional arguments (for instance, if it
        accepts ``*args`` or has defaults).
        """
        if self._initializer is None:
            return self._default_parameters()
        try:
            signature = inspect.signature(self._initializer)
        except (TypeError, ValueError):
            return None
        positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        names = []
        for parameter in tuple(signature.parameters.values())[1:]:
            if parameter.kind == inspect.Parameter.VAR_KEYWORD:
                continue
            if parameter.kind == inspect.Parameter.KEYWORD_ONLY and parameter.default is not parameter.empty:
                continue
            if parameter.kind not in positional or parameter.default is not parameter.empty:
                return None
            names.append(parameter.name)
        return tuple(names)

    def _default_parameters(self) -> typing.Optional[typing.Tuple[str, ...]]:
        if self.parent is None:
            return self.own_fields
        inherited = self.parent.parameters()
        if inherited is None:
            return None
        return inherited + self.own_fields

    def _initialize_fields(self, instance, *args, **kwargs):
        """Assign positional arguments to fields, passing the leading arguments to the parent.

        The parent receives as many arguments as its initializer takes.
        """
        if kwargs:
            raise TypeError('{}() got unexpected keyword argument(s): {}'.format(self.name, ', '.join(kwargs)))
        parameters = self._default_parameters()
        if parameters is None:
            raise ProtocolError(
                f'The initializer of {self.parent.name} does not take a fixed list of positional arguments. '
                f'{self.name} needs its own initializer.')
        if len(args) != len(parameters):
            raise TypeError('{}() takes {} positional argument(s) ({}) but {} were given'.format(
                self.name, len(parameters), ', '.join(parameters), len(args)))
        split = len(parameters) - len(self.own_fields)
        if self.parent is not None:
            self.parent.initialize(instance, *args[:split])
        for name, value in zip(self.own_fields, args[split:]):
            assign_field(instance, name, value)

    def __call__(self, *args, **kwargs):
        """Create a fully initialized instance."""
        self.seal()
        if self._factory is not None:
            return self._factory(*args, **kwargs)
        instance = Instance(self)
        self.initialize(instance, *args, **kwargs)
        verify(instance)
        return instance


class Instance:
    """An object created from a declared blueprint.

    Field values are read and assigned as attributes. Other public attribute
    names are resolved as behaviors along the delegation chain and returned as
    bound methods.
    """
    __slots__ = (STATE_ATTRIBUTE,)

    def __init__(self, blueprint: Blueprint):
        object.__setattr__(self, STATE_ATTRIBUTE, InstanceState(blueprint))

    def __getattr__(self, name):
        # Only called when regular attribute lookup fails.
        if name.startswith('_'):
            raise AttributeError(name)
        blueprint = state_of(self).blueprint
        if name in blueprint.fields:
            return read_field(self, name)
        function = blueprint.behavior(name)
        return types.MethodType(function, self)

    def __setattr__(self, name, value):
        assign_field(self, name, value)

    def __delattr__(self, name):
        raise ProtocolError(f'Fields cannot be removed from {self!r}.')

    def __dir__(self):
        blueprint = state_of(self).blueprint
        return sorted(set(blueprint.fields) | set(blueprint.behaviors()))

    def __copy__(self):
        clone = object.__new__(type(self))
        object.__setattr__(clone, STATE_ATTRIBUTE, state_of(self).copy())
        return clone

    def __deepcopy__(self, memo):
        clone = object.__new__(type(self))
        memo[id(self)] = clone
        object.__setattr__(clone, STATE_ATTRIBUTE, state_of(self).copy(memo))
        return clone

    def __repr__(self):
        state = state_of(self)
        values = ', '.join(f'{name}={state.values[name]!r}'
                           for name in state.blueprint.fields if name in state.values)
        return f'{state.blueprint.name}({values})'


def declare(name: TypeRepr,
            fields: typing.Sequence[str] = (),
            *,
            behaviors: typing.Mapping[str, Behavior] = None,
            initializer: Initializer = None,
            registry: Registry = None) -> Blueprint:
    """Declare a root blueprint.

    Example::

        hero = declare('Hero', ('name', 'level'),
                       behaviors={'greet': lambda self: f'{self.name} says hello.'})
        assert hero('Varg', 1).greet() == 'Varg says hello.'

    """
    return Blueprint(name,
                     fields,
                     behaviors=behaviors,
                     initializer=initializer,
                     registry=registry)


def blueprint_of(obj) -> Blueprint:
    """Get the blueprint an object was created from.

    Raises:
        APIError if *obj* was not created from a blueprint.
    """
    return state_of(obj).blueprint


def instance_of(obj, blueprint: Blueprint) -> bool:
    """Whether *obj* was created from *blueprint* or one of its descendants."""
    try:
        state = state_of(obj)
    except APIError:
        return False
    return state.blueprint.is_a(blueprint)


def fields_of(obj) -> typing.Dict[str, typing.Any]:
    """Get the field values of an instance, in declaration order."""
    blueprint = blueprint_of(obj)
    return {name: read_field(obj, name) for name in blueprint.fields}
