"""Core blueprintmodel exceptions."""

__all__ = ['APIError',
           'BehaviorNotFoundError',
           'BlueprintError',
           'InitializationError',
           'ProtocolError',
           'ScopeError']


class BlueprintError(Exception):
    """Base exception for blueprintmodel package errors.

    Users should be able to use this base class to catch errors
    emitted by blueprintmodel.
    """


class APIError(BlueprintError):
    """Specified interfaces are being violated."""


class ProtocolError(BlueprintError):
    """A blueprint declaration does not follow the declaration protocol.

    Examples include duplicate registration, re-declared fields, multiple
    parents, and changes to a sealed blueprint.
    """


class ScopeError(BlueprintError):
    """A registry context was used outside of its scope."""


class BehaviorNotFoundError(BlueprintError, AttributeError):
    """No blueprint in the delegation chain provides the requested behavior.

    Derives from AttributeError so that ``getattr(instance, name, default)``
    and ``hasattr()`` behave as usual for blueprint instances.
    """
    def __init__(self, blueprint: str, behavior: str):
        self.blueprint = blueprint
        self.behavior = behavior
        super().__init__(f'{blueprint} has no behavior {behavior!r}.')


class InitializationError(ProtocolError, AttributeError):
    """An instance was constructed without completing its initializer chain.

    Usually indicates a child initializer that did not chain to the parent
    initializer, leaving inherited fields unset.
    """
