"""
    Arborist: Head finding, normalization and surgery for parse trees

    Trees module

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

    This module implements Tree, a mutable constituency tree whose nodes
    carry immutable Label instances, and Label itself.

    A Tree node owns its children but holds no link to its parent.
    The parent of a node is found by searching downwards from a root,
    using Tree.parent(root).

    Trees can be read from and written to the bracketed notation used by
    the Penn Treebank:

        (ROOT
            (S
                (NP (NNP John))
                (VP (VBD saw) (NP (NNP Mary)))
            )
        )

    A bracket without a label, as in ( (S ...) ), yields a root node
    whose label is None.

"""

from typing import (
    Callable,
    Iterable,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Union,
)

import re

from tokenizer import correct_spaces

from .matcher import ContextDict, match_pattern


# Predicate type for tree filters (prune, splice_out)
TreeFilter = Callable[["Tree"], bool]


class Label(NamedTuple):

    """ The immutable content of a tree node. For nonterminals and
        preterminals, value is the category (e.g. 'NP-SBJ' or 'NNP').
        For leaves, value is the word itself; word is then also set,
        and tag contains the part-of-speech of the enclosing preterminal,
        if known. """

    value: str
    word: Optional[str] = None
    tag: Optional[str] = None

    @property
    def text(self) -> str:
        """ The plain text projection of the label: the word if
            available, otherwise the value """
        return self.word if self.word is not None else self.value

    def __str__(self) -> str:
        if self.tag is not None and self.word is not None:
            return "{0}/{1}".format(self.word, self.tag)
        return self.text


class Tree:

    """ A node in a constituency tree, with a label and
        an ordered list of child nodes """

    def __init__(
        self, label: Optional[Label] = None, children: Optional[Iterable["Tree"]] = None
    ) -> None:
        self._label = label
        self._children: List[Tree] = list(children) if children else []

    @classmethod
    def leaf(cls, word: str, tag: Optional[str] = None) -> "Tree":
        """ Create a leaf (terminal) node for a word """
        return cls(Label(word, word, tag))

    @classmethod
    def node(cls, value: Optional[str], children: Iterable["Tree"] = ()) -> "Tree":
        """ Create a nonterminal node having the given category """
        return cls(None if value is None else Label(value), children)

    @classmethod
    def preterminal(cls, tag: str, word: str) -> "Tree":
        """ Create a preterminal node over a single leaf """
        return cls(Label(tag), [cls.leaf(word, tag)])

    @classmethod
    def from_bracketed(cls, txt: str) -> "Tree":
        """ Read a single tree in bracketed notation """
        trees = read_trees(txt)
        if len(trees) != 1:
            raise ValueError(
                "Expected a single bracketed tree, found {0}".format(len(trees))
            )
        return trees[0]

    @property
    def label(self) -> Optional[Label]:
        return self._label

    def set_label(self, label: Optional[Label]) -> None:
        self._label = label

    @property
    def value(self) -> Optional[str]:
        """ The value (category or word) of this node's label, or None """
        return None if self._label is None else self._label.value

    @property
    def word(self) -> Optional[str]:
        """ The word of a leaf node, or None for other nodes """
        if self._children or self._label is None:
            return None
        return self._label.text

    @property
    def is_leaf(self) -> bool:
        """ Is this a leaf (terminal) node? """
        return not self._children

    @property
    def is_preterminal(self) -> bool:
        """ Is this a part-of-speech node over a single leaf? """
        return len(self._children) == 1 and self._children[0].is_leaf

    @property
    def is_phrasal(self) -> bool:
        """ Is this a node with children that is not a preterminal? """
        return bool(self._children) and not self.is_preterminal

    @property
    def children(self) -> List["Tree"]:
        """ A copy of the list of children of this node """
        return list(self._children)

    @property
    def num_children(self) -> int:
        return len(self._children)

    def child(self, index: int) -> "Tree":
        return self._children[index]

    @property
    def first_child(self) -> Optional["Tree"]:
        return self._children[0] if self._children else None

    @property
    def last_child(self) -> Optional["Tree"]:
        return self._children[-1] if self._children else None

    def set_children(self, children: Optional[Iterable["Tree"]]) -> None:
        """ Replace the children of this node. None means no children. """
        self._children = list(children) if children else []

    def set_child(self, index: int, child: "Tree") -> None:
        """ Replace the child at the given index """
        self._children[index] = child

    def add_child(self, child: "Tree") -> None:
        self._children.append(child)

    def object_index_of(self, child: "Tree") -> int:
        """ Return the index of the given node among this node's children,
            compared by identity and not by equality, or -1 if it is
            not a child of this node """
        for i, ch in enumerate(self._children):
            if ch is child:
                return i
        return -1

    def parent(self, root: "Tree") -> Optional["Tree"]:
        """ Return the parent of this node within the tree rooted at root,
            or None if this node is the root or is not found in the tree """
        for node in root.subtrees:
            if node.object_index_of(self) >= 0:
                return node
        return None

    def match_tag(self, item: Union[str, List[str]]) -> bool:
        """ Return True if the given item matches the category of this
            node, either fully or partially. NP matches NP-SBJ and NP-SBJ-1,
            while NP-SBJ only matches NP-SBJ and its extensions. """
        value = self.value
        if value is None:
            return False
        if value.startswith("-"):
            # Special labels such as -NONE- and -LRB- are matched as-is
            return item == value if isinstance(item, str) else item == [value]
        tags = value.split("-")
        if isinstance(item, str):
            item = item.split("-")
        return tags[0 : len(item)] == item

    @property
    def subtrees(self) -> Iterator["Tree"]:
        """ Generator for this node and all its descendants, in pre-order """
        yield self
        for child in self._children:
            yield from child.subtrees

    @property
    def descendants(self) -> Iterator["Tree"]:
        """ Generator for all descendants of this node, in pre-order """
        for child in self._children:
            yield child
            yield from child.descendants

    @property
    def leaves(self) -> Iterator["Tree"]:
        """ Generator for all leaf nodes under this node, left to right """
        if not self._children:
            yield self
            return
        for child in self._children:
            yield from child.leaves

    @property
    def preterminals(self) -> Iterator["Tree"]:
        """ Generator for all preterminal nodes under this node """
        for node in self.subtrees:
            if node.is_preterminal:
                yield node

    @property
    def text(self) -> str:
        """ Return the words covered by this subtree, separated by spaces """
        return " ".join(leaf.word or "" for leaf in self.leaves if leaf.word)

    @property
    def tidy_text(self) -> str:
        """ Return the text covered by this subtree
            after correcting its spacing """
        return correct_spaces(self.text)

    def deep_copy(self) -> "Tree":
        """ Return a copy of this tree consisting of fresh nodes
            all the way down """
        return self.__class__(self._label, (ch.deep_copy() for ch in self._children))

    def prune(self, accept: TreeFilter) -> Optional["Tree"]:
        """ Return a new tree from which the subtrees that are not accepted
            by the filter have been removed, as well as any interior nodes
            that are thereby left without children. Returns None if the
            whole tree is removed. The original tree is not modified. """
        if not accept(self):
            return None
        if not self._children:
            return self.__class__(self._label)
        kids: List[Tree] = []
        for child in self._children:
            pruned = child.prune(accept)
            if pruned is not None:
                kids.append(pruned)
        if not kids:
            # This node no longer dominates anything
            return None
        return self.__class__(self._label, kids)

    def _splice_out(self, accept: TreeFilter) -> List["Tree"]:
        """ Return a list of trees corresponding to this node with
            spliced-out descendants, being either a single node or,
            if this node itself is spliced out, its (spliced) children """
        if not self._children:
            leaf = self.__class__(self._label)
            return [leaf] if accept(leaf) else []
        kids: List[Tree] = []
        for child in self._children:
            kids.extend(child._splice_out(accept))
        # Test the node as it looks after its children have been spliced,
        # so that newly exposed unary chains are also caught
        candidate = self.__class__(self._label, kids)
        if accept(candidate):
            return [candidate]
        return kids

    def splice_out(self, accept: TreeFilter) -> Optional["Tree"]:
        """ Return a new tree where every node that is not accepted by the
            filter has been replaced by its children. The filter is applied
            bottom-up. If the root itself is spliced out and leaves more
            than one tree behind, they are gathered under a new root
            with no label. The original tree is not modified. """
        kids = self._splice_out(accept)
        if not kids:
            return None
        if len(kids) == 1:
            return kids[0]
        return self.__class__(None, kids)

    def _bracket_form(self) -> str:
        """ Return a bracketed representation of the tree """
        result: List[str] = []

        def push(node: "Tree") -> None:
            if not node._children:
                result.append(node.value or "")
                return
            result.append("(" + (node.value or ""))
            for child in node._children:
                result.append(" ")
                push(child)
            result.append(")")

        push(self)
        return "".join(result)

    @property
    def bracket_form(self) -> str:
        """ Return a bracketed representation of the tree on one line """
        return self._bracket_form()

    def _view(self, level: int) -> str:
        """ Return a string containing an indented map of this subtree """
        if level == 0:
            indent = ""
        else:
            indent = "  " * (level - 1) + "+-"
        if self.is_preterminal:
            return "{0}{1}: '{2}'".format(indent, self.value, self._children[0].value)
        if self._children:
            return (
                indent
                + (self.value or "[]")
                + "".join("\n" + child._view(level + 1) for child in self._children)
            )
        return "{0}'{1}'".format(indent, self.value)

    @property
    def view(self) -> str:
        """ Return a nicely formatted string showing this subtree """
        return self._view(0)

    def all_matches(
        self, pattern: str, context: Optional[ContextDict] = None
    ) -> Iterator["Tree"]:
        """ Return all subtree roots, including self, that match the given pattern """
        for subtree in self.subtrees:
            if match_pattern(subtree, pattern, context) is not None:
                yield subtree

    def first_match(
        self, pattern: str, context: Optional[ContextDict] = None
    ) -> Optional["Tree"]:
        """ Return the first subtree root, including self, that matches the given
            pattern. If no subtree matches, return None. """
        return next(self.all_matches(pattern, context), None)

    def top_matches(
        self, pattern: str, context: Optional[ContextDict] = None
    ) -> Iterator["Tree"]:
        """ Return all subtree roots, including self, that match the given pattern,
            but not recursively, i.e. we don't include matches within matches """
        if match_pattern(self, pattern, context) is not None:
            yield self
        else:
            for child in self._children:
                yield from child.top_matches(pattern, context)

    def match(self, pattern: str, context: Optional[ContextDict] = None) -> bool:
        """ Return True if this subtree matches the given pattern """
        return match_pattern(self, pattern, context) is not None

    def __getitem__(self, index: Union[str, int]) -> "Tree":
        """ Return a child by index, or the first child whose category
            matches the given tag, i.e. tree['NP'] """
        if isinstance(index, str):
            for child in self._children:
                if child.match_tag(index):
                    return child
            raise KeyError("Subtree has no {0} child".format(index))
        return self._children[index]

    def __len__(self) -> int:
        """ Return the number of children of this node """
        return len(self._children)

    def __eq__(self, other: object) -> bool:
        """ Trees are equal if their labels have the same values
            and their children are pairwise equal """
        if self is other:
            return True
        if not isinstance(other, Tree):
            return NotImplemented
        if self.value != other.value or len(self._children) != len(other._children):
            return False
        return all(a == b for a, b in zip(self._children, other._children))

    # Trees are mutable and compared structurally
    __hash__ = None  # type: ignore

    def __str__(self) -> str:
        return self.bracket_form

    def __repr__(self) -> str:
        """ Return a compact representation of this subtree """
        if not self._children:
            return "<Tree for leaf '{0}'>".format(self.value)
        return "<Tree with label {0} and {1} children>".format(
            self.value, len(self._children)
        )


_TOKEN_RE = re.compile(r"[^\s()]+")


def read_trees(txt: str) -> List[Tree]:
    """ Read a sequence of trees in bracketed notation from a string """
    roots: List[Tree] = []
    # Stack of currently open nonterminals
    stack: List[Tree] = []
    p = 0
    end = len(txt)

    def skipspace() -> None:
        """ Advance the p index past any whitespace """
        nonlocal p
        while p < end and txt[p].isspace():
            p += 1

    def skiptoken() -> str:
        """ Advance the p index past a label or a word, returning it """
        nonlocal p
        skipspace()
        m = _TOKEN_RE.match(txt, p)
        if m is None:
            return ""
        p = m.end()
        return m.group(0)

    while True:
        skipspace()
        if p >= end:
            break
        c = txt[p]
        if c == "(":
            # Left parenthesis: open a new nonterminal, possibly without a label
            p += 1
            t = skiptoken()
            node = Tree(Label(t) if t else None)
            if stack:
                stack[-1].add_child(node)
            else:
                roots.append(node)
            stack.append(node)
        elif c == ")":
            # Right parenthesis: the enclosing nonterminal is done
            p += 1
            if not stack:
                raise ValueError("Unbalanced right parenthesis at position {0}".format(p))
            node = stack.pop()
            if node.is_preterminal and node.value is not None:
                # Let the leaf know its part-of-speech tag
                leaf = node.child(0)
                leaf.set_label(Label(leaf.value or "", leaf.word, node.value))
        else:
            word = skiptoken()
            if not stack:
                raise ValueError("Word '{0}' outside of brackets".format(word))
            stack[-1].add_child(Tree.leaf(word))

    if stack:
        raise ValueError("String is unbalanced or not properly terminated")
    return roots
