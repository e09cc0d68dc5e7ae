"""Test blueprints declared with class syntax."""
import copy
import logging

import pytest

from blueprintmodel.blueprint import blueprint_of
from blueprintmodel.blueprint import fields_of
from blueprintmodel.classes import BlueprintObject
from blueprintmodel.classes import Field
from blueprintmodel.exceptions import APIError
from blueprintmodel.exceptions import BehaviorNotFoundError
from blueprintmodel.exceptions import InitializationError
from blueprintmodel.exceptions import ProtocolError
from blueprintmodel.identifier import TypeIdentifier
from blueprintmodel import walkthrough

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))


def test_class_blueprints(registry):
    class Hero(BlueprintObject):
        name = Field()
        level = Field(doc='Experience level.')

        def __init__(self, name, level):
            self.name = name
            self.level = level

        def greet(self):
            return f'{self.name} says hello.'

    class Mage(Hero):
        spell = Field()

        def __init__(self, name, level, spell):
            super().__init__(name, level)
            self.spell = spell

    hero1 = Hero('Varg', 1)
    assert hero1.greet() == 'Varg says hello.'
    assert fields_of(hero1) == {'name': 'Varg', 'level': 1}

    hero2 = Mage('Lejon', 2, 'Magic Missile')
    assert list(fields_of(hero2).items()) == [('name', 'Lejon'), ('level', 2), ('spell', 'Magic Missile')]
    assert hero2.greet() == 'Lejon says hello.'
    assert hero2.greet() == hero2.greet()
    assert repr(hero2) == "Mage(name='Lejon', level=2, spell='Magic Missile')"

    assert Mage.blueprint.parent is Hero.blueprint
    assert Mage.blueprint.fields == ('name', 'level', 'spell')
    assert Hero.blueprint.own_behaviors == ('greet',)
    assert Mage.blueprint.provider('greet') is Hero.blueprint
    assert blueprint_of(hero2) is Mage.blueprint
    assert Mage.blueprint.sealed
    assert Hero.level.__doc__ == 'Experience level.'

    # Registered under the module and qualified name of the class.
    assert registry.get(Mage) is Mage.blueprint
    assert Mage.blueprint.identifier == TypeIdentifier.copy_from(Mage)
    assert Mage.blueprint.name == 'Mage'

    # The blueprint is a factory for the class.
    hero3 = Mage.blueprint('Ysolde', 3, 'Fireball')
    assert isinstance(hero3, Mage)
    assert Hero.blueprint.invoke(hero3, 'greet') == 'Ysolde says hello.'


def test_generated_init(registry):
    class Hero(BlueprintObject, blueprint_name='game.Hero'):
        name = Field()
        level = Field()

        def greet(self):
            return f'{self.name} says hello.'

    class Mage(Hero, blueprint_name='game.Mage'):
        spell = Field()

    hero2 = Mage('Lejon', 2, 'Magic Missile')
    assert fields_of(hero2) == {'name': 'Lejon', 'level': 2, 'spell': 'Magic Missile'}
    assert hero2.greet() == 'Lejon says hello.'
    assert registry.get('game.Mage') is Mage.blueprint
    assert registry.get(('game', 'Hero')) is Hero.blueprint
    with pytest.raises(TypeError):
        Mage('Lejon', 2)
    with pytest.raises(TypeError):
        Hero('Varg', 1, 'extra')


def test_shadowing(registry):
    class Hero(BlueprintObject):
        name = Field()
        level = Field()

        def greet(self):
            return f'{self.name} says hello.'

    class Mage(Hero):
        spell = Field()

        def greet(self):
            return f'{self.name} casts {self.spell}.'

    hero1 = Hero('Varg', 1)
    hero2 = Mage('Lejon', 2, 'Magic Missile')
    assert hero2.greet() == 'Lejon casts Magic Missile.'
    assert hero1.greet() == 'Varg says hello.'
    assert Mage.blueprint.provider('greet') is Mage.blueprint
    assert Hero.blueprint.invoke(hero2, 'greet') == 'Lejon says hello.'


def test_unchained_init(registry):
    class Hero(BlueprintObject):
        name = Field()
        level = Field()

        def __init__(self, name, level):
            self.name = name
            self.level = level

    class Mage(Hero):
        spell = Field()

        def __init__(self, name, level, spell):
            self.spell = spell

    with pytest.raises(InitializationError):
        Mage('Lejon', 2, 'Magic Missile')

    class Apprentice(Hero):
        def __init__(self, name, level):
            self.spell_book = None

    with pytest.raises(ProtocolError):
        Apprentice('Pip', 0)


def test_incomplete_init(registry):
    class Hero(BlueprintObject):
        name = Field()
        level = Field()

        def __init__(self, name, level):
            self.name = name
            # Inherited field reads fail while unset.
            with pytest.raises(InitializationError):
                self.level

    with pytest.raises(InitializationError, match='level'):
        Hero('Varg', 1)


def test_attributes(registry):
    class Hero(BlueprintObject):
        name = Field()
        level = Field()

        def greet(self):
            return f'{self.name} says hello.'

    hero1 = Hero('Varg', 1)
    with pytest.raises(ProtocolError):
        hero1.mana = 3
    with pytest.raises(ProtocolError):
        del hero1.name
    hero1._cache = 'private attributes are not fields'
    assert hero1._cache

    with pytest.raises(BehaviorNotFoundError):
        hero1.fly()
    assert not hasattr(hero1, 'fly')

    with pytest.raises(ProtocolError):
        Hero.blueprint.attach('shout', lambda self: self.name.upper())
    with pytest.raises(ProtocolError):
        Hero.blueprint.extend('Archer', ('arrows',))


def test_declaration_errors(registry):
    class Hero(BlueprintObject):
        name = Field()

    class Villain(BlueprintObject):
        name = Field()

    with pytest.raises(ProtocolError):
        class Antihero(Hero, Villain):
            pass

    class Mixin:
        def wave(self):
            return 'wave'

    with pytest.raises(ProtocolError):
        class Waving(Hero, Mixin):
            pass

    with pytest.raises(ProtocolError):
        class Reserved(BlueprintObject):
            blueprint = None

    with pytest.raises(ProtocolError):
        class Redeclared(Hero):
            name = Field()

    with pytest.raises(APIError):
        BlueprintObject()


def test_styles_are_equivalent(registry):
    hero, mage = walkthrough.declare_heroes(registry)
    assert hero.fields == walkthrough.Hero.blueprint.fields
    assert mage.fields == walkthrough.Mage.blueprint.fields
    assert set(mage.behaviors()) == set(walkthrough.Mage.blueprint.behaviors())

    for hero_factory, mage_factory in ((hero, mage), (walkthrough.Hero, walkthrough.Mage)):
        hero1 = hero_factory('Varg', 1)
        hero2 = mage_factory('Lejon', 2, 'Magic Missile')
        assert hero1.greet() == 'Varg says hello.'
        assert hero2.greet() == 'Lejon says hello.'
        assert fields_of(hero2) == {'name': 'Lejon', 'level': 2, 'spell': 'Magic Missile'}


def test_generated_init_follows_parent_init(registry):
    class Hero(BlueprintObject):
        name = Field()
        level = Field()

        def __init__(self, name):
            self.name = name
            self.level = 1

    class Mage(Hero):
        spell = Field()

    assert Hero.blueprint.parameters() == ('name',)
    assert Mage.blueprint.parameters() == ('name', 'spell')
    hero2 = Mage('Lejon', 'Magic Missile')
    assert fields_of(hero2) == {'name': 'Lejon', 'level': 1, 'spell': 'Magic Missile'}
    with pytest.raises(TypeError):
        Mage('Lejon', 2, 'Magic Missile')

    class Archmage(Mage):
        tower = Field()

    sage = Archmage('Ysolde', 'Fireball', 'Spire')
    assert fields_of(sage) == {'name': 'Ysolde', 'level': 1, 'spell': 'Fireball', 'tower': 'Spire'}

    class Villain(BlueprintObject):
        name = Field()
        level = Field()

        def __init__(self, name, level=10):
            self.name = name
            self.level = level

    assert Villain.blueprint.parameters() is None
    with pytest.raises(ProtocolError):
        class Henchman(Villain):
            weapon = Field()

    class Warlord(Villain):
        army = Field()

        def __init__(self, name, army):
            super().__init__(name)
            self.army = army

    assert fields_of(Warlord('Grum', 300)) == {'name': 'Grum', 'level': 10, 'army': 300}


def test_copies_are_independent(registry):
    class Hero(BlueprintObject):
        name = Field()
        level = Field()

        def greet(self):
            return f'{self.name} says hello.'

    class Mage(Hero):
        spell = Field()

    hero1 = Hero('Varg', [1])
    hero1._notes = ['private']

    shallow = copy.copy(hero1)
    assert type(shallow) is Hero
    assert fields_of(shallow) == fields_of(hero1)
    shallow.name = 'Lejon'
    assert hero1.name == 'Varg'
    assert shallow.greet() == 'Lejon says hello.'
    assert shallow.level is hero1.level
    assert shallow._notes is hero1._notes

    deep = copy.deepcopy(hero1)
    deep.level.append(2)
    assert hero1.level == [1]
    assert deep._notes == ['private']
    assert deep._notes is not hero1._notes

    hero2 = Mage('Lejon', 2, 'Magic Missile')
    clone = copy.deepcopy(hero2)
    assert isinstance(clone, Hero)
    assert blueprint_of(clone) is Mage.blueprint
    clone.spell = 'Fireball'
    assert hero2.spell == 'Magic Missile'
    assert repr(clone) == "Mage(name='Lejon', level=2, spell='Fireball')"
