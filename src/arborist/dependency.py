"""
    Arborist: Head finding, normalization and surgery for parse trees

    Dependency module

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


    This module contains word-to-word dependencies, i.e. pairs of a
    governor (head) and a dependent, and a function that extracts
    them from a constituency tree by way of a head finder.

    Dependencies are compared by the text of their governor and
    dependent, not by the identity of their labels, so that the
    dependencies of a tree can be collected in a set and compared
    with those of another analysis of the same sentence.

"""

from typing import Hashable, Optional, Set, Tuple

from xml.sax.saxutils import escape

from .cache import cached_property
from .headfinder import HeadFinder
from .trees import Label, Tree


class UnnamedDependency:

    """ A dependency between a governor and a dependent """

    def __init__(self, governor: Optional[Label], dependent: Optional[Label]) -> None:
        if governor is None or dependent is None:
            raise ValueError("governor or dependent cannot be None")
        self._governor = governor
        self._dependent = dependent

    @classmethod
    def from_strings(cls, governor: str, dependent: str) -> "UnnamedDependency":
        """ Create a dependency between two words """
        if governor is None or dependent is None:
            raise ValueError("governor or dependent cannot be None")
        return cls(Label(governor, governor), Label(dependent, dependent))

    @property
    def governor(self) -> Label:
        return self._governor

    @property
    def dependent(self) -> Label:
        return self._dependent

    @property
    def name(self) -> Optional[str]:
        return None

    @cached_property
    def governor_text(self) -> str:
        return self._governor.text

    @cached_property
    def dependent_text(self) -> str:
        return self._dependent.text

    def _key(self) -> Tuple[Hashable, ...]:
        return (self.governor_text, self.dependent_text)

    def equals_ignore_name(self, other: object) -> bool:
        """ Compare the governor and dependent texts only """
        if not isinstance(other, UnnamedDependency):
            return False
        return (
            self.governor_text == other.governor_text
            and self.dependent_text == other.dependent_text
        )

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, UnnamedDependency):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return "{0} --> {1}".format(self.governor_text, self.dependent_text)

    def __repr__(self) -> str:
        return "<{0} {1}>".format(self.__class__.__name__, self)

    def to_string(self, fmt: Optional[str] = None) -> str:
        """ Return a string representation in the given format,
            'xml' or 'predicate'. Other formats give str(). """
        if fmt == "xml":
            return (
                "  <dep>\n    <governor>{0}</governor>\n"
                "    <dependent>{1}</dependent>\n  </dep>".format(
                    escape(self._governor.value), escape(self._dependent.value)
                )
            )
        if fmt == "predicate":
            return "dep({0},{1})".format(self._governor, self._dependent)
        return str(self)


class NamedDependency(UnnamedDependency):

    """ A dependency that carries a name, such as a relation type """

    def __init__(
        self, governor: Optional[Label], dependent: Optional[Label], name: Optional[str]
    ) -> None:
        super().__init__(governor, dependent)
        self._name = name

    @property
    def name(self) -> Optional[str]:
        return self._name

    def _key(self) -> Tuple[Hashable, ...]:
        return (self.governor_text, self.dependent_text, self._name)

    def __str__(self) -> str:
        return "{0} --{1}--> {2}".format(
            self.governor_text, self._name, self.dependent_text
        )

    def to_string(self, fmt: Optional[str] = None) -> str:
        if fmt == "xml":
            return (
                "  <dep>\n    <governor>{0}</governor>\n"
                "    <dependent>{1}</dependent>\n    <name>{2}</name>\n  </dep>".format(
                    escape(self.governor.value),
                    escape(self.dependent.value),
                    escape(str(self._name)),
                )
            )
        if fmt == "predicate":
            return "dep({0},{1},{2})".format(self.governor, self.dependent, self._name)
        return str(self)


class DependencyFactory:

    """ Creates unnamed dependencies. Instances are stateless. """

    def new_dependency(
        self, governor: Label, dependent: Label, name: Optional[str] = None
    ) -> UnnamedDependency:
        return UnnamedDependency(governor, dependent)


class NamedDependencyFactory(DependencyFactory):

    """ Creates named dependencies """

    def new_dependency(
        self, governor: Label, dependent: Label, name: Optional[str] = None
    ) -> UnnamedDependency:
        return NamedDependency(governor, dependent, name)


UNNAMED_FACTORY = DependencyFactory()
NAMED_FACTORY = NamedDependencyFactory()


def dependencies(
    tree: Tree, head_finder: HeadFinder, factory: DependencyFactory = UNNAMED_FACTORY
) -> Set[UnnamedDependency]:
    """ Return the set of dependencies induced by the head finder on
        the tree: within each phrase, the head word of every child except
        the head child depends on the head word of the phrase. Named
        dependencies are named after the category of the dependent phrase. """
    result: Set[UnnamedDependency] = set()

    def head_label(node: Tree) -> Optional[Label]:
        return head_finder.head_terminal(node).label

    def visit(node: Tree, parent: Optional[Tree]) -> None:
        if not node.is_phrasal:
            return
        head = head_finder.determine_head(node, parent)
        gov = head_label(head)
        for child in node.children:
            if child is not head:
                dep = head_label(child)
                if gov is not None and dep is not None:
                    result.add(
                        factory.new_dependency(
                            gov, dep, head_finder.tlp.basic_category(child.value)
                        )
                    )
            visit(child, node)

    visit(tree, None)
    return result
