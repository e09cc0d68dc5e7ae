"""Test blueprint registries and identifiers."""
import logging

import pytest

from blueprintmodel.blueprint import declare
from blueprintmodel.exceptions import APIError
from blueprintmodel.exceptions import ProtocolError
from blueprintmodel.exceptions import ScopeError
from blueprintmodel.identifier import TypeIdentifier
from blueprintmodel.registry import Registry
from blueprintmodel.registry import get_registry

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))


def test_type_identifier():
    identifier = TypeIdentifier.copy_from('game.heroes.Hero')
    assert identifier == TypeIdentifier.copy_from(['game', 'heroes', 'Hero'])
    assert identifier == TypeIdentifier.copy_from(identifier)
    assert hash(identifier) == hash(TypeIdentifier(('game', 'heroes', 'Hero')))
    assert identifier != TypeIdentifier.copy_from('game.Hero')
    assert str(identifier) == 'game.heroes.Hero'
    assert identifier.name() == ('game', 'heroes', 'Hero')
    assert identifier.short_name() == 'Hero'
    assert identifier.namespace() == ('game', 'heroes')
    assert identifier.encode() == ['game', 'heroes', 'Hero']
    assert len(bytes(identifier)) == 16

    assert str(TypeIdentifier.copy_from(Registry)) == 'blueprintmodel.registry.Registry'

    with pytest.raises(TypeError):
        TypeIdentifier('Hero')
    with pytest.raises(TypeError):
        TypeIdentifier.copy_from(42)
    with pytest.raises(APIError):
        TypeIdentifier.copy_from('game..Hero')
    with pytest.raises(APIError):
        TypeIdentifier(())


def test_registration(registry):
    assert get_registry() is registry
    hero = declare('Hero', ('name', 'level'))
    mage = hero.extend('game.Mage', ('spell',))
    assert registry.get('Hero') is hero
    assert registry.get(('game', 'Mage')) is mage
    assert 'Hero' in registry
    assert 'Bard' not in registry
    assert 42 not in registry
    assert len(registry) == 2
    assert set(registry) == {hero, mage}
    assert registry.names() == ['Hero', 'game.Mage']

    with pytest.raises(ProtocolError):
        declare('Hero', ('name',))
    with pytest.raises(APIError):
        registry.get('Bard')

    registry.unregister('Hero')
    assert 'Hero' not in registry
    with pytest.raises(APIError):
        registry.unregister('Hero')
    assert registry.declare('Hero', ('name',)) is registry.get('Hero')


def test_scopes():
    root = get_registry()
    with Registry(label='outer') as outer:
        hero = declare('Hero', ('name', 'level'))
        assert get_registry() is outer
        with Registry(label='inner') as inner:
            assert get_registry() is inner
            # Children are declared alongside their parent by default.
            mage = hero.extend('Mage', ('spell',))
            bard = hero.extend('Bard', ('song',), registry=inner)
            # The same name may be declared in another registry.
            declare('Hero', ('name',))
        assert get_registry() is outer
        assert 'Mage' in outer
        assert mage.registry is outer
        assert 'Bard' in inner
        assert 'Bard' not in outer
        assert bard.registry is inner
    assert get_registry() is root
    assert 'Hero' not in root


def test_finalize_protocol():
    root = get_registry()
    registry = Registry()
    with registry:
        with pytest.raises(ScopeError):
            registry.__enter__()
    with pytest.warns(UserWarning):
        registry.finalize()

    outer = Registry(label='outer')
    inner = Registry(label='inner')
    outer.__enter__()
    inner.__enter__()
    with pytest.warns(UserWarning):
        outer.finalize()
    assert get_registry() is inner
    inner.finalize()
    assert get_registry() is root
