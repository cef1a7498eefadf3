"""
    Arborist: Head finding, normalization and surgery for parse trees

    Tree surgery module

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


    This module implements tree surgery operations, which rewrite the
    nodes located by a pattern match (see matcher.py).

    The operations are adjunction operations, as in Tree-Adjoining
    Grammar. An auxiliary tree is written in bracketed notation, with
    exactly one foot node marked with a trailing @:

        (VP (ADVP (RB really)) VP@)

    Adjoining this tree at a VP node replaces the VP with a copy of the
    auxiliary tree, and moves the children of the original VP under the
    foot. Nodes in an auxiliary tree can be named with =name, and labels
    ending in -#k are given a fresh coindexation number, the same one for
    every occurrence of k within the auxiliary tree.

    Example:

        >>> aux = AuxiliaryTree.from_bracketed("(VP (ADVP (RB really)) VP@)")
        >>> process_pattern("VP=vp", AdjoinNode(aux, FetchNode("vp")), tree)

"""

from typing import Dict, List, Optional, Sequence, Tuple

import logging
import re

from .basics import COINDEX_MARKER, FOOT_MARKER
from .matcher import ContextDict, TreeMatch, all_matches, split_name
from .trees import Label, Tree


logger = logging.getLogger(__name__)

# Existing coindexation numbers, as in NP-SBJ-2
_COINDEX_RE = re.compile(r".+?-([0-9]+)$")
# Coindexation placeholders in auxiliary trees, as in NP-SBJ-#1
_PLACEHOLDER_RE = re.compile(r"^(.*)" + re.escape(COINDEX_MARKER) + r"([0-9]+)$")


class CoindexationGenerator:

    """ Generates coindexation numbers that are not already
        used within a tree """

    def __init__(self) -> None:
        self._last_index = 0

    @property
    def last_index(self) -> int:
        return self._last_index

    def set_last_index(self, tree: Tree) -> None:
        """ Start numbering after the highest index found in the tree """
        self._last_index = 0
        for node in tree.subtrees:
            value = node.value
            if value is None:
                continue
            m = _COINDEX_RE.match(value)
            if m is not None:
                self._last_index = max(self._last_index, int(m.group(1)))

    def next_index(self) -> int:
        self._last_index += 1
        return self._last_index


class AuxiliaryTree:

    """ A tree with a single designated foot node, for use in
        adjunction. An auxiliary tree is never modified: adjunction
        operations graft a fresh copy of it into the target tree. """

    def __init__(self, tree: Tree) -> None:
        """ Create an auxiliary tree from a tree in which the foot is
            a leaf whose label ends with @ """
        self._tree = tree.deep_copy()
        self._names: Dict[str, Tree] = {}
        feet: List[Tree] = []
        for node in self._tree.subtrees:
            label = node.label
            if label is None:
                continue
            value, name = split_name(label.value)
            if node.is_leaf and len(value) > 1 and value.endswith(FOOT_MARKER):
                value = value[: -len(FOOT_MARKER)]
                # The foot is a frontier nonterminal, not a word
                node.set_label(Label(value))
                feet.append(node)
            elif name is not None:
                node.set_label(
                    label._replace(
                        value=value, word=None if label.word is None else value
                    )
                )
            if name is not None:
                if name in self._names:
                    raise ValueError(
                        "Name '{0}' used more than once in auxiliary tree".format(name)
                    )
                self._names[name] = node
        if len(feet) != 1:
            raise ValueError(
                "Auxiliary tree must have exactly one foot node, found {0}: {1}".format(
                    len(feet), self._tree
                )
            )
        self._foot = feet[0]

    @classmethod
    def from_bracketed(cls, txt: str) -> "AuxiliaryTree":
        return cls(Tree.from_bracketed(txt))

    @property
    def tree(self) -> Tree:
        return self._tree

    @property
    def foot(self) -> Tree:
        return self._foot

    @property
    def names(self) -> Dict[str, Tree]:
        """ The named nodes of this auxiliary tree """
        return self._names

    def copy(self, coindexer: CoindexationGenerator) -> "AuxiliaryTree":
        """ Return a fresh copy of this auxiliary tree, where coindexation
            placeholders have been replaced by new indices """
        indices: Dict[str, int] = {}
        # Map from the id of original nodes to their copies
        copies: Dict[int, Tree] = {}

        def relabel(label: Optional[Label]) -> Optional[Label]:
            if label is None:
                return None
            m = _PLACEHOLDER_RE.match(label.value)
            if m is None:
                return label
            k = m.group(2)
            if k not in indices:
                indices[k] = coindexer.next_index()
            return label._replace(value="{0}-{1}".format(m.group(1), indices[k]))

        def copy_node(node: Tree) -> Tree:
            result = Tree(relabel(node.label), (copy_node(ch) for ch in node.children))
            copies[id(node)] = result
            return result

        new_tree = copy_node(self._tree)
        result = AuxiliaryTree.__new__(AuxiliaryTree)
        result._tree = new_tree
        result._foot = copies[id(self._foot)]
        result._names = {name: copies[id(node)] for name, node in self._names.items()}
        return result

    def __str__(self) -> str:
        return str(self._tree)

    def __repr__(self) -> str:
        return "<AuxiliaryTree {0}>".format(self._tree)


class TsurgeonPattern:

    """ Base class of tree surgery operations """

    def __init__(self, label: str, children: Sequence["TsurgeonPattern"]) -> None:
        self._label = label
        self._children = tuple(children)

    @property
    def label(self) -> str:
        return self._label

    @property
    def children(self) -> Tuple["TsurgeonPattern", ...]:
        return self._children

    def evaluate(
        self,
        tree: Tree,
        match: TreeMatch,
        coindexer: Optional[CoindexationGenerator] = None,
    ) -> Optional[Tree]:
        """ Apply the operation to the tree, for the given match.
            Returns the resulting tree, or None if the operation
            did not apply. """
        raise NotImplementedError

    def __str__(self) -> str:
        return "{0}({1})".format(self._label, ", ".join(str(c) for c in self._children))


class FetchNode(TsurgeonPattern):

    """ Locates the node bound to a name in the match. The name None
        stands for the node matched by the pattern as a whole. """

    def __init__(self, name: Optional[str] = None) -> None:
        super().__init__("fetch", ())
        self._name = name

    @property
    def name(self) -> Optional[str]:
        return self._name

    def evaluate(
        self,
        tree: Tree,
        match: TreeMatch,
        coindexer: Optional[CoindexationGenerator] = None,
    ) -> Optional[Tree]:
        if self._name is None:
            return match.node
        node = match.names.get(self._name)
        if node is None:
            logger.debug("Name '%s' is not bound in match", self._name)
        return node

    def __str__(self) -> str:
        return "=" + (self._name or "")


class AdjoinNode(TsurgeonPattern):

    """ Adjoin an auxiliary tree at the node located by the child
        operation, as in Tree-Adjoining Grammar """

    LABEL = "adjoin"

    def __init__(
        self, aux: Optional[AuxiliaryTree], child: Optional[TsurgeonPattern]
    ) -> None:
        if aux is None or child is None:
            raise ValueError(
                "{0}: illegal null argument, aux={1}, child={2}".format(
                    self.LABEL, aux, child
                )
            )
        super().__init__(self.LABEL, (child,))
        self._aux = aux

    @property
    def adjunction_tree(self) -> AuxiliaryTree:
        return self._aux

    def _prepare(
        self,
        tree: Tree,
        match: TreeMatch,
        coindexer: Optional[CoindexationGenerator],
    ) -> Optional[Tuple[Tree, Optional[Tree], AuxiliaryTree]]:
        """ Locate the target node and its parent, and make a fresh copy
            of the auxiliary tree, registering its named nodes in the match.
            Returns None if there is no target within the tree. """
        target = self._children[0].evaluate(tree, match, coindexer)
        if target is None:
            return None
        parent = target.parent(tree)
        if parent is None and target is not tree:
            # A bound node that an earlier operation removed from the tree
            logger.debug("Target is no longer in tree: %r", target)
            return None
        if coindexer is None:
            coindexer = CoindexationGenerator()
            coindexer.set_last_index(tree)
        ft = self._aux.copy(coindexer)
        match.names.update(ft.names)
        return target, parent, ft

    def evaluate(
        self,
        tree: Tree,
        match: TreeMatch,
        coindexer: Optional[CoindexationGenerator] = None,
    ) -> Optional[Tree]:
        prepared = self._prepare(tree, match, coindexer)
        if prepared is None:
            return None
        target, parent, ft = prepared
        # Put the children of the target under the foot of the auxiliary tree
        ft.foot.set_children(target.children)
        # ...and replace the target with the root of the auxiliary tree
        if parent is None:
            return ft.tree
        parent.set_child(parent.object_index_of(target), ft.tree)
        return tree

    def __str__(self) -> str:
        return super().__str__() + "<-" + str(self._aux)


class AdjoinToHeadNode(AdjoinNode):

    """ Adjoin an auxiliary tree at a node, keeping the node itself
        as the root of the result. The label of the auxiliary tree's
        root is ignored. """

    LABEL = "adjoinH"

    def evaluate(
        self,
        tree: Tree,
        match: TreeMatch,
        coindexer: Optional[CoindexationGenerator] = None,
    ) -> Optional[Tree]:
        prepared = self._prepare(tree, match, coindexer)
        if prepared is None:
            return None
        target, _, ft = prepared
        ft.foot.set_children(target.children)
        # The root of the auxiliary tree is dropped, and its children
        # become the children of the target
        target.set_children(ft.tree.children)
        return tree


class AdjoinToFootNode(AdjoinNode):

    """ Adjoin an auxiliary tree at a node, keeping the node itself,
        children and all, as the foot of the result """

    LABEL = "adjoinF"

    def evaluate(
        self,
        tree: Tree,
        match: TreeMatch,
        coindexer: Optional[CoindexationGenerator] = None,
    ) -> Optional[Tree]:
        prepared = self._prepare(tree, match, coindexer)
        if prepared is None:
            return None
        target, parent, ft = prepared
        foot_parent = ft.foot.parent(ft.tree)
        if foot_parent is None:
            # The auxiliary tree consists of its foot only
            return tree
        foot_parent.set_child(foot_parent.object_index_of(ft.foot), target)
        if parent is None:
            return ft.tree
        parent.set_child(parent.object_index_of(target), ft.tree)
        return tree


class TsurgeonProgram:

    """ A pattern together with the operations to apply at each
        of its matches """

    def __init__(
        self,
        pattern: str,
        operations: Sequence[TsurgeonPattern],
        context: Optional[ContextDict] = None,
    ) -> None:
        self._pattern = pattern
        self._operations = tuple(operations)
        self._context = context
        self._coindexer = CoindexationGenerator()

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def operations(self) -> Tuple[TsurgeonPattern, ...]:
        return self._operations

    def process(self, tree: Tree) -> Tree:
        """ Apply the operations at every match of the pattern in the tree,
            in pre-order. The matches are located before any operation is
            applied, and a match whose node has been removed from the tree
            by an earlier operation is skipped. Returns the resulting tree,
            which is the original one modified in place unless the
            root itself was replaced. """
        self._coindexer.set_last_index(tree)
        for m in list(all_matches(tree, self._pattern, self._context)):
            if m.node is not tree and m.node.parent(tree) is None:
                logger.debug("Skipping match at node no longer in tree: %r", m.node)
                continue
            for op in self._operations:
                result = op.evaluate(tree, m, self._coindexer)
                if result is None:
                    logger.debug("Operation %s did not apply", op)
                else:
                    tree = result
        return tree

    def __str__(self) -> str:
        return "{0}\n\n{1}".format(
            self._pattern, "\n".join(str(op) for op in self._operations)
        )


def process_pattern(
    pattern: str,
    operation: TsurgeonPattern,
    tree: Tree,
    context: Optional[ContextDict] = None,
) -> Tree:
    """ Apply a single operation at every match of the pattern in the tree """
    return TsurgeonProgram(pattern, (operation,), context).process(tree)
