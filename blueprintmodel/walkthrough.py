"""Walk through the Hero and Mage blueprints in both declaration styles.

A blueprint can be declared like a constructor function, with behaviors
attached afterwards, or with class syntax. The two styles produce the same
fields, the same behaviors and the same delegation chain.

Run with ``python -m blueprintmodel``.
"""
from __future__ import annotations

__all__ = ['Hero', 'Mage', 'declare_heroes', 'main']

import argparse
import logging
import typing

from blueprintmodel.blueprint import Blueprint
from blueprintmodel.blueprint import declare
from blueprintmodel.classes import BlueprintObject
from blueprintmodel.classes import Field
from blueprintmodel.inspection import compact_json
from blueprintmodel.inspection import render
from blueprintmodel.registry import Registry

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))


def declare_heroes(registry: Registry = None) -> typing.Tuple[Blueprint, Blueprint]:
    """Declare Hero and Mage in the constructor function style.

    Returns:
        The (hero, mage) blueprints.
    """
    hero = declare('Hero', ('name', 'level'), registry=registry)

    @hero.attach
    def greet(self):
        return f'{self.name} says hello.'

    def initialize_mage(this, name, level, spell):
        # Chain constructor
        hero.initialize(this, name, level)
        this.spell = spell

    mage = hero.extend('Mage', ('spell',), initializer=initialize_mage)
    return hero, mage


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
        # Chain constructor with super
        super().__init__(name, level)
        self.spell = spell


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='python -m blueprintmodel',
                                     description='Print the Hero and Mage blueprint walkthrough.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log blueprint declarations.')
    return parser


def _show(title: str, hero: typing.Callable, mage: typing.Callable):
    print(title)
    print('-' * len(title))
    hero1 = hero('Varg', 1)
    print(render(hero1))
    print(hero1.greet())
    print()
    hero2 = mage('Lejon', 2, 'Magic Missile')
    print(render(hero2))
    print(hero2.greet())
    print(compact_json(hero2))
    print()


def main(argv: typing.Sequence[str] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    with Registry(label='walkthrough') as registry:
        hero, mage = declare_heroes(registry)
        _show('Constructor functions', hero, mage)
    _show('Classes', Hero, Mage)
    return 0
