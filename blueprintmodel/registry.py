"""Manage the blueprint registry.

Blueprints are declared into a Registry, which maps blueprint names
(TypeIdentifiers) to Blueprint objects. Declarations that do not name a
registry explicitly use the current registry.

This module allows the Python interpreter to track a global stack of registries
so that a block of code (such as a unit test) can declare blueprints into a
private scope without colliding with names declared elsewhere::

    with Registry() as registry:
        hero = declare('Hero', ('name', 'level'))
        assert registry.get('Hero') is hero

A root registry is always available at the bottom of the stack.
"""
from __future__ import annotations

__all__ = ['Registry', 'get_registry']

import logging
import typing
import warnings

from blueprintmodel.exceptions import APIError
from blueprintmodel.exceptions import ProtocolError
from blueprintmodel.exceptions import ScopeError
from blueprintmodel.identifier import TypeIdentifier
from blueprintmodel.identifier import TypeRepr

if typing.TYPE_CHECKING:
    from blueprintmodel.blueprint import Blueprint

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))


class Registry:
    """Map blueprint names to declared blueprints.

    Names are unique within a registry. A Registry may be used as a context
    manager to make it the current registry for the duration of a block.
    """

    def __init__(self, label: str = None):
        self.label = label
        self._blueprints: typing.MutableMapping[TypeIdentifier, 'Blueprint'] = dict()
        self.__active = False

    def __repr__(self):
        return '<{} {} ({} blueprints)>'.format(
            self.__class__.__name__,
            repr(self.label) if self.label is not None else hex(id(self)),
            len(self._blueprints))

    def register(self, blueprint: 'Blueprint'):
        """Add a blueprint under its identifier.

        Raises:
            ProtocolError if the name is already registered.
        """
        identifier = blueprint.identifier
        if identifier in self._blueprints:
            raise ProtocolError(f'Blueprint {identifier} appears to be registered already.')
        logger.debug(f'Registering {identifier} in {self!r}.')
        self._blueprints[identifier] = blueprint

    def unregister(self, typeid: TypeRepr):
        identifier = TypeIdentifier.copy_from(typeid)
        try:
            del self._blueprints[identifier]
        except KeyError:
            raise APIError(f'No blueprint registered as {identifier}.') from None

    def get(self, typeid: TypeRepr) -> 'Blueprint':
        """Get a registered blueprint by name.

        Raises:
            APIError if no blueprint is registered under the normalized name.
        """
        identifier = TypeIdentifier.copy_from(typeid)
        if identifier not in self._blueprints:
            raise APIError(f'No blueprint registered as {identifier}.')
        return self._blueprints[identifier]

    def names(self) -> typing.List[str]:
        return sorted(str(identifier) for identifier in self._blueprints)

    def __contains__(self, typeid) -> bool:
        try:
            identifier = TypeIdentifier.copy_from(typeid)
        except (TypeError, APIError):
            return False
        return identifier in self._blueprints

    def __iter__(self) -> typing.Iterator['Blueprint']:
        return iter(tuple(self._blueprints.values()))

    def __len__(self):
        return len(self._blueprints)

    def declare(self, name: TypeRepr, fields: typing.Sequence[str] = (), **kwargs) -> 'Blueprint':
        """Declare a root blueprint in this registry.

        See :py:func:`blueprintmodel.blueprint.declare`.
        """
        from blueprintmodel.blueprint import declare
        return declare(name, fields, registry=self, **kwargs)

    def finalize(self):
        if self.__active:
            registry = _registries.pop()
            if registry is not self:
                warnings.warn('Bad finalizer protocol may indicate a leak: Registry is active, but not current.')
                _registries.append(registry)
                _registries.remove(self)
            self.__active = False
        else:
            warnings.warn('Registry.finalize has been called more than once.')

    def __enter__(self):
        if self.__active:
            raise ScopeError('Registry is already active.')
        _registries.append(self)
        self.__active = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finalize()
        # Return False to indicate we have not handled any exceptions.
        return False


_registries = [Registry(label='root')]


def get_registry() -> Registry:
    """Get the current (innermost active) registry."""
    return _registries[-1]
