"""
    Arborist: Head finding, normalization and surgery for parse trees

    Head finder module

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


    This module implements a head finder in the style of Collins (1999),
    i.e. an interpreter for head rule tables.

    For a node with more than one child, the basic category of the node
    (the mother category) is looked up in the rule table. Each of the
    directive lists found there is tried in turn until one of them
    locates a child. The last list is applied as a last resort: if it
    does not find anything, the head finder tries to pick the first
    child, counting from the side the list searches from, that is not
    among the categories to avoid (typically punctuation). If every child
    is to be avoided, the child at the boundary is taken. Whichever child
    is decided on, the post operation fix hook sees its index once.

    Corpus-specific behavior, such as explicitly marked heads or the
    Collins correction for coordination, is supplied by a HeadFinderHooks
    instance rather than by subclassing the engine.

"""

from typing import Iterable, List, Optional, Sequence

import logging

from .basics import CONTINUATION_MARKER, ConfigError
from .headrules import Direction, HeadRule, RuleTable
from .settings import HeadRules, Settings
from .trees import Tree
from .treebank import PennTreebankLanguagePack, TreebankLanguagePack


logger = logging.getLogger(__name__)


class HeadFinderHooks:

    """ Overridable points of the head finding algorithm.
        The default implementation changes nothing. """

    def find_marked_head(self, tree: Tree) -> Optional[Tree]:
        """ Return an explicitly marked head child of the tree, if any """
        return None

    def post_operation_fix(self, head_ix: int, kids: Sequence[Tree]) -> int:
        """ Adjust the index of a head child found by a directive list """
        return head_ix

    def makes_copula_head(self) -> bool:
        return False


class HeadFinder:

    """ Determines the head child of tree nodes from a rule table """

    def __init__(
        self,
        tlp: TreebankLanguagePack,
        rules: Optional[RuleTable] = None,
        *,
        categories_to_avoid: Iterable[str] = (),
        default_rule: Optional[HeadRule] = None,
        hooks: Optional[HeadFinderHooks] = None
    ) -> None:
        self._tlp = tlp
        self._rules = rules
        self._default_rule = default_rule
        self._hooks = hooks or HeadFinderHooks()
        avoid = tuple(categories_to_avoid)
        # The rules to use in last-resort searches
        if avoid:
            self._default_left_rule = HeadRule(Direction.LEFTEXCEPT, avoid)
            self._default_right_rule = HeadRule(Direction.RIGHTEXCEPT, avoid)
        else:
            self._default_left_rule = HeadRule(Direction.LEFT)
            self._default_right_rule = HeadRule(Direction.RIGHT)

    @property
    def tlp(self) -> TreebankLanguagePack:
        return self._tlp

    @property
    def rules(self) -> Optional[RuleTable]:
        return self._rules

    def set_rules(self, rules: RuleTable) -> None:
        self._rules = rules

    @property
    def default_rule(self) -> Optional[HeadRule]:
        return self._default_rule

    @property
    def default_left_rule(self) -> HeadRule:
        return self._default_left_rule

    @property
    def default_right_rule(self) -> HeadRule:
        return self._default_right_rule

    @property
    def hooks(self) -> HeadFinderHooks:
        return self._hooks

    def makes_copula_head(self) -> bool:
        """ Does this head finder make the copula the head of
            a copular clause? """
        return self._hooks.makes_copula_head()

    def category(self, tree: Tree) -> Optional[str]:
        """ Return the basic category of a tree node """
        return self._tlp.basic_category(tree.value)

    def determine_head(self, tree: Optional[Tree], parent: Optional[Tree] = None) -> Tree:
        """ Return the child of tree that is its head """
        if self._rules is None:
            raise ConfigError("Head finder has no rule table")
        if tree is None or tree.is_leaf:
            raise ValueError("Can't return head of null or leaf Tree")
        # An explicitly marked head wins
        head = self._hooks.find_marked_head(tree)
        if head is not None:
            return head
        if tree.num_children == 1:
            return tree.child(0)
        return self.determine_nontrivial_head(tree, parent)

    def determine_nontrivial_head(
        self, tree: Tree, parent: Optional[Tree] = None
    ) -> Tree:
        """ Determine the head of a node with more than one child """
        if self._rules is None:
            raise ConfigError("Head finder has no rule table")
        mother = self.category(tree) or ""
        if mother.startswith(CONTINUATION_MARKER):
            mother = mother[1:]
        kids = tree.children
        how = self._rules.get(mother)
        if not how:
            if self._default_rule is not None:
                logger.debug("No head rule for %s, using default rule", mother)
                return self.locate_last_resort(kids, self._default_rule)
            raise ConfigError(
                "No head rule defined for {0} in {1}".format(mother, tree.bracket_form)
            )
        for rule in how[:-1]:
            head = self.traverse_locate(kids, rule, False)
            if head is not None:
                return head
        return self.locate_last_resort(kids, how[-1])

    def _find(self, kids: Sequence[Tree], rule: HeadRule) -> int:
        """ Return the index of the child located by the rule, or -1 """
        cats = [self.category(kid) for kid in kids]
        order: List[int] = list(range(len(kids)))
        if not rule.direction.from_left:
            order.reverse()
        if rule.direction.is_except:
            for ix in order:
                if cats[ix] not in rule.categories:
                    return ix
        elif rule.direction.is_dis:
            for ix in order:
                if cats[ix] in rule.categories:
                    return ix
        else:
            # Search for each category in turn
            for cat in rule.categories:
                for ix in order:
                    if cats[ix] == cat:
                        return ix
        return -1

    def traverse_locate(
        self, kids: Sequence[Tree], rule: HeadRule, last_resort: bool
    ) -> Optional[Tree]:
        """ Locate the head among kids using the given directive list.
            If nothing is found, return None unless last_resort is True,
            in which case a child is always returned. """
        if last_resort:
            return self.locate_last_resort(kids, rule)
        head_ix = self._find(kids, rule)
        if head_ix < 0:
            return None
        return kids[self._hooks.post_operation_fix(head_ix, kids)]

    def locate_last_resort(self, kids: Sequence[Tree], rule: HeadRule) -> Tree:
        """ Locate the head among kids using the given directive list,
            falling back to the first child from the search side that is
            not to be avoided, and then to the child at the boundary """
        head_ix = self._find(kids, rule)
        if head_ix < 0:
            if rule.direction.from_left:
                head_ix = 0
                default = self._default_left_rule
            else:
                head_ix = len(kids) - 1
                default = self._default_right_rule
            logger.debug("Last resort head search with rule '%s'", default)
            found = self._find(kids, default)
            if found >= 0:
                head_ix = found
        # The hook sees every decided index exactly once
        return kids[self._hooks.post_operation_fix(head_ix, kids)]

    def head_preterminal(self, tree: Tree) -> Tree:
        """ Follow the heads down from tree to a preterminal node """
        if tree.is_leaf:
            raise ValueError("Can't return head of null or leaf Tree")
        node = tree
        parent: Optional[Tree] = None
        while not node.is_preterminal:
            head = self.determine_head(node, parent)
            if head.is_leaf:
                # A bare leaf as a child of a phrasal node
                return node
            parent, node = node, head
        return node

    def head_terminal(self, tree: Tree) -> Tree:
        """ Follow the heads down from tree to a leaf (word) node """
        node = tree
        parent: Optional[Tree] = None
        while not node.is_leaf:
            parent, node = node, self.determine_head(node, parent)
        return node


class CollinsHooks(HeadFinderHooks):

    """ Collins' correction for coordination: a head found directly
        after a coordinating conjunction moves to the conjunct before
        the conjunction, skipping over punctuation """

    def __init__(self, tlp: TreebankLanguagePack) -> None:
        self._tlp = tlp

    def post_operation_fix(self, head_ix: int, kids: Sequence[Tree]) -> int:
        if head_ix >= 2:
            prev = self._tlp.basic_category(kids[head_ix - 1].value)
            if prev in ("CC", "CONJP"):
                new_ix = head_ix - 2
                while (
                    new_ix >= 0
                    and kids[new_ix].is_preterminal
                    and self._tlp.is_punctuation_tag(kids[new_ix].value)
                ):
                    new_ix -= 1
                if new_ix >= 0:
                    head_ix = new_ix
        return head_ix


class _ConfiguredHeadFinder(HeadFinder):

    """ A head finder using one of the tables from HeadRules.conf """

    TABLE = ""

    def __init__(self, tlp: Optional[TreebankLanguagePack] = None) -> None:
        Settings.read()
        tlp = tlp or PennTreebankLanguagePack()
        avoid = HeadRules.avoid(self.TABLE)
        super().__init__(
            tlp,
            HeadRules.table(self.TABLE),
            categories_to_avoid=sorted(
                tlp.punctuation_tags if avoid is None else avoid
            ),
            default_rule=HeadRules.default(self.TABLE),
            hooks=CollinsHooks(tlp),
        )


class CollinsHeadFinder(_ConfiguredHeadFinder):

    """ Head finder using the head rules of Collins (1999) """

    TABLE = "collins"


class ModCollinsHeadFinder(_ConfiguredHeadFinder):

    """ Head finder using a modified version of the Collins rules,
        covering the categories of the revised Penn Treebank """

    TABLE = "modcollins"
