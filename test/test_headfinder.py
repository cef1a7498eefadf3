"""

    test_headfinder.py

    Tests for the head finder in headfinder.py

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

"""

from typing import List, Optional, Sequence

import pytest

from arborist import (
    CollinsHeadFinder,
    ConfigError,
    Direction,
    HeadFinder,
    HeadFinderHooks,
    HeadRule,
    HeadRules,
    ModCollinsHeadFinder,
    PennTreebankLanguagePack,
    Tree,
    make_rule_table,
)


@pytest.fixture(scope="module")
def tlp() -> PennTreebankLanguagePack:
    return PennTreebankLanguagePack()


@pytest.fixture(scope="module")
def collins() -> CollinsHeadFinder:
    """ Provide a module-scoped Collins head finder as a test fixture """
    return CollinsHeadFinder()


class CountingHooks(HeadFinderHooks):

    """ Hooks that count the calls to post_operation_fix """

    def __init__(self) -> None:
        self.fixes = 0

    def post_operation_fix(self, head_ix: int, kids: Sequence[Tree]) -> int:
        self.fixes += 1
        return head_ix


class MarkedHeadHooks(HeadFinderHooks):

    """ Hooks for trees where the head is marked with a -H suffix """

    def find_marked_head(self, tree: Tree) -> Optional[Tree]:
        for child in tree.children:
            if child.value is not None and child.value.endswith("-H"):
                return child
        return None

    def makes_copula_head(self) -> bool:
        return True


def head_index(hf: HeadFinder, txt: str) -> int:
    """ Return the index of the head child of the tree in txt """
    t = Tree.from_bracketed(txt)
    return t.object_index_of(hf.determine_head(t))


def test_directions() -> None:
    assert Direction.from_tag("left") is Direction.LEFT
    assert Direction.from_tag("RightDis") is Direction.RIGHTDIS
    assert Direction.LEFTEXCEPT.from_left
    assert Direction.LEFTEXCEPT.is_except
    assert not Direction.RIGHT.from_left
    assert Direction.RIGHTDIS.is_dis
    assert not Direction.RIGHTDIS.is_except
    with pytest.raises(ConfigError):
        Direction.from_tag("sideways")
    rule = HeadRule.parse(["rightdis", "NN", "NNS"])
    assert rule.direction is Direction.RIGHTDIS
    assert rule.categories == ("NN", "NNS")
    assert str(rule) == "rightdis NN NNS"
    assert HeadRule.from_text("left") == HeadRule(Direction.LEFT, ())
    with pytest.raises(ConfigError):
        HeadRule.parse([])


def test_left_versus_leftdis(tlp) -> None:
    txt = "(Z (Y y) (X x))"
    hf = HeadFinder(tlp, make_rule_table({"Z": [["leftdis", "X", "Y"]]}))
    # leftdis takes the leftmost child having any of the categories
    assert head_index(hf, txt) == 0
    hf = HeadFinder(tlp, make_rule_table({"Z": [["left", "X", "Y"]]}))
    # left searches for each category in turn
    assert head_index(hf, txt) == 1
    hf = HeadFinder(tlp, make_rule_table({"Z": [["rightdis", "X", "Y"]]}))
    assert head_index(hf, "(Z (X x) (Y y) (W w))") == 1
    hf = HeadFinder(tlp, make_rule_table({"Z": [["right", "X", "Y"]]}))
    assert head_index(hf, "(Z (X x) (Y y) (W w))") == 0


def test_except(tlp) -> None:
    hf = HeadFinder(tlp, make_rule_table({"Z": [["leftexcept", "X", "Y"]]}))
    assert head_index(hf, "(Z (X x) (Y y) (W w) (V v))") == 2
    hf = HeadFinder(tlp, make_rule_table({"Z": [["rightexcept", "X", "Y"]]}))
    assert head_index(hf, "(Z (W w) (V v) (X x) (Y y))") == 1


def test_unary(tlp) -> None:
    # A single child is the head, whatever the rule table says
    for rules in ({}, {"Z": (HeadRule.parse(["right", "Q"]),)}):
        hf = HeadFinder(tlp, rules)
        t = Tree.from_bracketed("(Z (Y y))")
        assert hf.determine_head(t) is t.child(0)
    # ...and for a preterminal, the head is the word
    t = Tree.preterminal("NN", "dog")
    assert HeadFinder(tlp, {}).determine_head(t) is t.child(0)


def test_rule_order(tlp) -> None:
    rules = make_rule_table({"Z": [["left", "W"], ["right", "X"], ["left", "Y"]]})
    hf = HeadFinder(tlp, rules)
    # The first list finds nothing, so the second one is tried
    assert head_index(hf, "(Z (X x) (Y y) (X x))") == 2
    # Only the last list is a last resort
    assert head_index(hf, "(Z (Y y) (V v) (Y y))") == 0
    assert head_index(hf, "(Z (V v) (U u))") == 0
    kids = Tree.from_bracketed("(Z (V v) (U u))").children
    rule = HeadRule.parse(["left", "Y"])
    assert hf.traverse_locate(kids, rule, False) is None
    assert hf.traverse_locate(kids, rule, True) is kids[0]
    assert hf.locate_last_resort(kids, HeadRule.parse(["right", "Y"])) is kids[1]


def test_last_resort(tlp) -> None:
    rules = make_rule_table({"Z": [["right", "Q"]], "L": [["left", "Q"]]})
    hf = HeadFinder(tlp, rules, categories_to_avoid=("PUNCT",))
    assert hf.default_left_rule == HeadRule(Direction.LEFTEXCEPT, ("PUNCT",))
    assert hf.default_right_rule == HeadRule(Direction.RIGHTEXCEPT, ("PUNCT",))
    assert head_index(hf, "(Z (PUNCT p) (NP (NN n)))") == 1
    # The categories to avoid are preferred over the blind boundary choice
    assert head_index(hf, "(Z (NP (NN n)) (PUNCT p))") == 0
    assert head_index(hf, "(L (PUNCT p) (NP (NN n)) (VP (VB v)))") == 1
    # If every child is to be avoided, the boundary child is taken
    assert head_index(hf, "(Z (PUNCT p) (PUNCT q))") == 1
    assert head_index(hf, "(L (PUNCT p) (PUNCT q))") == 0
    # Without categories to avoid, the boundary child is taken
    hf = HeadFinder(tlp, rules)
    assert hf.default_right_rule == HeadRule(Direction.RIGHT, ())
    assert head_index(hf, "(Z (NP (NN n)) (PUNCT p))") == 1
    assert head_index(hf, "(L (PUNCT p) (NP (NN n)))") == 0


def test_post_operation_fix(tlp) -> None:
    rules = make_rule_table({"Z": [["left", "Y"]], "L": [["left", "Q"]]})
    hooks = CountingHooks()
    hf = HeadFinder(tlp, rules, categories_to_avoid=("PUNCT",), hooks=hooks)
    head_index(hf, "(Z (X x) (Y y))")
    assert hooks.fixes == 1
    # Found by the synthesized default rule: fixed once
    hooks.fixes = 0
    assert head_index(hf, "(L (PUNCT p) (Y y))") == 1
    assert hooks.fixes == 1
    # The boundary child is fixed too
    hooks.fixes = 0
    assert head_index(hf, "(L (PUNCT p) (PUNCT q))") == 0
    assert hooks.fixes == 1
    # Unary nodes are not fixed
    hooks.fixes = 0
    head_index(hf, "(Z (X x))")
    assert hooks.fixes == 0


class RecordingHooks(HeadFinderHooks):

    """ Hooks that record the indices passed to post_operation_fix,
        and move every head to the leftmost child """

    def __init__(self) -> None:
        self.indices: List[int] = []

    def post_operation_fix(self, head_ix: int, kids: Sequence[Tree]) -> int:
        self.indices.append(head_ix)
        return 0


def test_boundary_fix(tlp) -> None:
    hooks = RecordingHooks()
    rules = make_rule_table({"Z": [["right", "Q"]]})
    hf = HeadFinder(tlp, rules, categories_to_avoid=("PUNCT",), hooks=hooks)
    # The boundary index goes through the hook, once
    assert head_index(hf, "(Z (PUNCT p) (PUNCT q))") == 0
    assert hooks.indices == [1]
    hooks.indices = []
    # ...as does the index found by the default rule
    assert head_index(hf, "(Z (NP (NN n)) (PUNCT p) (PUNCT q))") == 0
    assert hooks.indices == [0]
    hooks.indices = []
    # ...and the index found by the default rule of the head finder
    hf = HeadFinder(tlp, {}, default_rule=HeadRule.parse(["right", "W"]), hooks=hooks)
    assert head_index(hf, "(Z (X x) (Y y))") == 0
    assert hooks.indices == [1]


def test_missing_rules(tlp) -> None:
    hf = HeadFinder(tlp)
    t = Tree.from_bracketed("(Z (X x) (Y y))")
    with pytest.raises(ConfigError):
        # No rule table
        hf.determine_head(t)
    with pytest.raises(ConfigError):
        hf.determine_nontrivial_head(t)
    hf.set_rules(make_rule_table({"Z": [["right"]]}))
    assert hf.determine_head(t) is t.child(1)
    t = Tree.from_bracketed("(Q (X x) (Y y))")
    with pytest.raises(ConfigError) as e:
        hf.determine_head(t)
    assert "Q" in str(e.value)
    hf = HeadFinder(tlp, {}, default_rule=HeadRule.parse(["leftdis", "Y"]))
    assert hf.determine_head(t) is t.child(1)
    # The default rule is applied as a last resort
    hf = HeadFinder(tlp, {}, default_rule=HeadRule.parse(["right", "W"]))
    assert hf.determine_head(t) is t.child(1)


def test_bad_arguments(tlp) -> None:
    hf = HeadFinder(tlp, {})
    with pytest.raises(ValueError):
        hf.determine_head(None)
    with pytest.raises(ValueError):
        hf.determine_head(Tree.leaf("dog"))


def test_labels(tlp) -> None:
    hf = HeadFinder(tlp, make_rule_table({"Z": [["left", "Y"]]}))
    # Functional tags and indices are ignored
    assert head_index(hf, "(Z-SBJ-1 (X-TMP x) (Y=2 y))") == 1
    # A leading @, as in binarized trees, is ignored
    assert head_index(hf, "(@Z (X x) (Y y))") == 1


def test_hooks(tlp) -> None:
    hf = HeadFinder(tlp, make_rule_table({"Z": [["left", "X"]]}))
    assert not hf.makes_copula_head()
    hf = HeadFinder(tlp, make_rule_table({"Z": [["left", "X"]]}), hooks=MarkedHeadHooks())
    assert hf.makes_copula_head()
    assert head_index(hf, "(Z (X x) (Y-H y))") == 1
    assert head_index(hf, "(Z (Y y) (X x))") == 1


def test_collins(collins) -> None:
    t = Tree.from_bracketed(
        "(ROOT (S (NP (NNP John)) (VP (VBD saw) (NP (NNP Mary))) (. .)))"
    )
    s = t.child(0)
    assert collins.determine_head(t) is s
    assert collins.determine_head(s) is s["VP"]
    assert collins.determine_head(s["VP"], s) is s["VP"]["VBD"]
    assert collins.head_terminal(t).value == "saw"
    assert collins.head_preterminal(t).value == "VBD"
    assert head_index(collins, "(NP (DT the) (JJ big) (NN dog))") == 2
    assert head_index(collins, "(NP (NP (DT the) (NN dog)) (POS 's))") == 1
    assert head_index(collins, "(PP (IN in) (NP (NN town)))") == 0
    # Punctuation is avoided in the last resort
    assert head_index(collins, "(FRAG (NP (NN fire)) (. !))") == 0
    # The head moves from the last conjunct to the first
    assert head_index(collins, "(ADVP (RB slowly) (CC and) (RB carefully))") == 0
    assert head_index(collins, "(ADVP (RB slowly) (, ,) (CC and) (RB carefully))") == 0
    assert head_index(collins, "(UCP (NN x) (CC and) (JJ y))") == 0
    assert not collins.makes_copula_head()
    assert collins.rules is HeadRules.table("collins")
    with pytest.raises(ConfigError):
        collins.determine_head(Tree.from_bracketed("(NOSUCH (X x) (Y y))"))


def test_modcollins() -> None:
    hf = ModCollinsHeadFinder()
    txt = "(NX (NP (NN a)) (NP (NN b)))"
    assert head_index(CollinsHeadFinder(), txt) == 0
    assert head_index(hf, txt) == 1
    assert head_index(hf, "(NP (NML (NNP New) (NNP York)) (NN city))") == 1
    assert head_index(hf, "(PP (PP (IN in) (NP (NN town))) (CC and) (PP (IN at) (NP (NN home))))") == 0
