"""Object blueprints with single-parent inheritance.

Declare blueprints (named templates with fields and behaviors) either in the
constructor function style with :py:func:`declare` or with class syntax by
subclassing :py:class:`BlueprintObject`. A child blueprint extends exactly one
parent, chains the parent initializer, and resolves behaviors along the
delegation chain.
"""

__all__ = ['APIError',
           'BehaviorNotFoundError',
           'Blueprint',
           'BlueprintError',
           'BlueprintObject',
           'Field',
           'InitializationError',
           'Instance',
           'ProtocolError',
           'Registry',
           'ScopeError',
           'TypeIdentifier',
           'blueprint_of',
           'declare',
           'fields_of',
           'get_registry',
           'instance_of']

from blueprintmodel.blueprint import Blueprint
from blueprintmodel.blueprint import Instance
from blueprintmodel.blueprint import blueprint_of
from blueprintmodel.blueprint import declare
from blueprintmodel.blueprint import fields_of
from blueprintmodel.blueprint import instance_of
from blueprintmodel.classes import BlueprintObject
from blueprintmodel.classes import Field
from blueprintmodel.exceptions import APIError
from blueprintmodel.exceptions import BehaviorNotFoundError
from blueprintmodel.exceptions import BlueprintError
from blueprintmodel.exceptions import InitializationError
from blueprintmodel.exceptions import ProtocolError
from blueprintmodel.exceptions import ScopeError
from blueprintmodel.identifier import TypeIdentifier
from blueprintmodel.registry import Registry
from blueprintmodel.registry import get_registry
