"""
    Arborist: Head finding, normalization and surgery for parse trees

    Head rules module

    Copyright (C) 2021 Miðeind ehf.

    This software is licensed under the MIT License:

        Permission is hereby granted, free of charge, to any person
        obtaining a copy of this software and associated documentation
        files (the "Software"), to deal in the Software without restriction,
        including without limitation the rights to use, copy, modify, merge,
        publish, distribute, sublicense, and/or sell copies of the Software,
        and to permit persons to whom the Software is furnished to do so,
        subject to the following conditions:

        The above copyright notice and this permission notice shall be
        included in all copies or substantial portions of the Software.

        THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
        EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
        MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT.
        IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY
        CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT,
        TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE
        SOFTWARE OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.

    This module defines the data that drives the head finder: a head rule
    (directive list) is a search direction plus a list of categories, and a
    rule table maps a mother category to an ordered tuple of head rules.

    The directions are:

    left        for each category in turn, search the children left to
                right for a child having that category
    leftdis     search the children left to right for a child having
                any of the categories
    leftexcept  take the first child from the left whose category is
                not among the categories
    right, rightdis, rightexcept
                the same, searching right to left

    In textual form, a head rule is written as its direction followed by
    its categories, e.g. 'rightdis NN NNP NNS', and the rules of a
    category are separated by semicolons.

"""

from typing import Dict, Iterable, List, NamedTuple, Sequence, Tuple

from enum import Enum

from .basics import ConfigError


class Direction(Enum):

    """ The search modes of a head rule """

    LEFT = "left"
    LEFTDIS = "leftdis"
    LEFTEXCEPT = "leftexcept"
    RIGHT = "right"
    RIGHTDIS = "rightdis"
    RIGHTEXCEPT = "rightexcept"

    @classmethod
    def from_tag(cls, tag: str) -> "Direction":
        try:
            return cls(tag.strip().lower())
        except ValueError:
            raise ConfigError("Invalid head rule direction '{0}'".format(tag))

    @property
    def from_left(self) -> bool:
        """ True if the search starts at the leftmost child """
        return self in _LEFT_DIRECTIONS

    @property
    def is_except(self) -> bool:
        """ True if the categories are to be avoided rather than sought """
        return self in (Direction.LEFTEXCEPT, Direction.RIGHTEXCEPT)

    @property
    def is_dis(self) -> bool:
        """ True if the search is by position first and category second """
        return self in (Direction.LEFTDIS, Direction.RIGHTDIS)


_LEFT_DIRECTIONS = frozenset((Direction.LEFT, Direction.LEFTDIS, Direction.LEFTEXCEPT))


class HeadRule(NamedTuple):

    """ A single directive list: a direction and a tuple of categories """

    direction: Direction
    categories: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, how: Sequence[str]) -> "HeadRule":
        """ Create a head rule from its list form, where the
            first element is the direction, e.g. ['left', 'NP', 'VP'] """
        if not how:
            raise ConfigError("Empty head rule")
        return cls(Direction.from_tag(how[0]), tuple(how[1:]))

    @classmethod
    def from_text(cls, txt: str) -> "HeadRule":
        """ Create a head rule from its textual form, e.g. 'left NP VP' """
        return cls.parse(txt.split())

    def __str__(self) -> str:
        return " ".join((self.direction.value,) + self.categories)


# Mapping of mother category to its head rules, in order
RuleTable = Dict[str, Tuple[HeadRule, ...]]


def parse_rules(txt: str) -> Tuple[HeadRule, ...]:
    """ Parse a semicolon-separated sequence of head rules """
    rules: List[HeadRule] = []
    for part in txt.split(";"):
        part = part.strip()
        if not part:
            raise ConfigError("Empty head rule in '{0}'".format(txt.strip()))
        rules.append(HeadRule.from_text(part))
    return tuple(rules)


def make_rule_table(entries: Dict[str, Iterable[Sequence[str]]]) -> RuleTable:
    """ Build a rule table from a dict of category: list of rules in
        list form, i.e. { 'NP': [['rightdis', 'NN', 'NNS'], ['left', 'NP']] } """
    table: RuleTable = {}
    for cat, rules in entries.items():
        parsed = tuple(HeadRule.parse(how) for how in rules)
        if not parsed:
            raise ConfigError("No head rules given for category '{0}'".format(cat))
        table[cat] = parsed
    return table
