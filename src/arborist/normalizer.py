"""
    Arborist: Head finding, normalization and surgery for parse trees

    Tree normalizer module

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


    This module contains tree normalizers, which bring raw treebank trees
    into a canonical form before they are used for training or evaluation.

    The BobChrisTreeNormalizer (named after Bob Moore and Chris Manning)
    removes empty elements, i.e. -NONE- nodes covering a single trace or
    null word, together with any constituents that thereby become empty.
    It then splices out unary A over A nodes, such as an NP whose only
    child is another NP, and the EDITED and CODE nodes of Switchboard.

"""

from typing import Optional

from .basics import EDITED_LABELS, NONE_LABEL
from .trees import Label, Tree
from .treebank import PennTreebankLanguagePack, TreebankLanguagePack


class TreeNormalizer:

    """ Base class for tree normalizers. This implementation
        leaves everything as it is. """

    def normalize_terminal(self, leaf: str) -> str:
        return leaf

    def normalize_nonterminal(self, category: Optional[str]) -> Optional[str]:
        return category

    def normalize_whole_tree(self, tree: Optional[Tree]) -> Optional[Tree]:
        return tree

    def transform_tree(self, tree: Optional[Tree]) -> Optional[Tree]:
        """ Apply the normalizer to a whole tree """
        return self.normalize_whole_tree(tree)

    def normalize_labels(self, tree: Tree) -> Tree:
        """ Return a copy of the tree whose labels have been normalized,
            nonterminals and preterminals with normalize_nonterminal()
            and leaves with normalize_terminal() """
        if tree.is_leaf:
            label = tree.label
            if label is None:
                return Tree()
            word = self.normalize_terminal(label.value)
            return Tree(Label(word, word, label.tag))
        category = self.normalize_nonterminal(tree.value)
        return Tree(
            None if category is None else Label(category),
            (self.normalize_labels(child) for child in tree.children),
        )


class BobChrisTreeNormalizer(TreeNormalizer):

    """ Normalizer that deletes empty elements and unary A over A nodes,
        and reduces categories to their basic form """

    def __init__(self, tlp: Optional[TreebankLanguagePack] = None) -> None:
        self._tlp = tlp or PennTreebankLanguagePack()

    @property
    def tlp(self) -> TreebankLanguagePack:
        return self._tlp

    def normalize_nonterminal(self, category: Optional[str]) -> str:
        """ Strip functional tags and indices from a category, giving
            the start symbol for a missing label """
        if not category:
            return self._tlp.start_symbol
        return self._tlp.basic_category(category) or category

    def normalize_whole_tree(self, tree: Optional[Tree]) -> Optional[Tree]:
        """ Remove empty elements, then splice out A over A nodes.
            The result is a new tree. """
        if tree is None:
            return None
        pruned = tree.prune(self.empty_filter)
        if pruned is None:
            return None
        return pruned.splice_out(self.a_over_a_filter)

    @staticmethod
    def empty_filter(t: Tree) -> bool:
        """ Reject nodes that only cover an empty element """
        return not (
            t.value == NONE_LABEL
            and not t.is_leaf
            and t.num_children == 1
            and t.child(0).is_leaf
        )

    @staticmethod
    def a_over_a_filter(t: Tree) -> bool:
        """ Reject unary A over A nodes, as well as
            EDITED and CODE nodes """
        if t.is_leaf or t.is_preterminal:
            return True
        if t.value in EDITED_LABELS:
            return False
        if t.num_children != 1:
            return True
        return t.value is None or t.value != t.child(0).value
