"""
    Arborist: Head finding, normalization and surgery for parse trees

    Pattern matching module

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

    This module exports the function match_pattern() which can determine
    whether a Tree instance matches a pattern string, and if so, which
    nodes were bound to the names given in the pattern.

    The match patterns are as follows:
    ----------------------------------

    `.` matches any tree node.

    `"literal"` matches a subtree covering exactly the given literal text,
        albeit compared case-neutrally. Note that this pattern may match
        a nonterminal node. If you want to match a single leaf only,
        use `@"literal"`.

    `@"literal"` matches a leaf node having exactly the given word,
        albeit compared case-neutrally.

    `CATEGORY` matches a nonterminal or preterminal node having the given
        category. NP matches NP as well as NP-SBJ and NP-SBJ-1, while
        NP-SBJ only matches NP-SBJ and its extensions.

    `Any=name` matches if Any matches, and binds the matched node to name.
        Names start with a letter or underscore. If the item matches more
        than one node, as in `NP=np+`, the name is bound to the last one.

    `%macro` is resolved by looking up the key 'macro' in the context
    dictionary, which is an optional parameter to match_pattern(). The
    corresponding value can be either a string, in which case the string
    is used as the pattern, or a callable (function) which is then called
    with a tree node as an argument. If the function returns a bool, that
    is the result of the match. Otherwise, it should return a string,
    which is used as the pattern.

    `Any1 Any2 Any3` matches the given sequence as-is, in-order

    `Any+` matches one or more sequential instances of Any

    `Any*` matches zero or more sequential instances of Any

    `Any?` matches zero or one sequential instances of Any

    `.*` matches any number of any nodes (as an example)

    `(Any1 | Any2 | ...)` matches if anything within the parentheses matches

    `Any1 > { Any2 Any3 ... }` matches if Any1 matches and has immediate children
        that include Any2, Any3 *and* other given arguments (irrespective of order).
        This is a set-like operator.

    `Any1 >> { Any2 Any3 ... }` matches if Any1 matches and has children at any
        sublevel that include Any2, Any3 *and* other given arguments
        (irrespective of order). This is a set-like operator.

    `Any1 > [ Any2 Any3 ...]` matches if Any1 matches and has immediate children
        that include Any2, Any3 *and* other given arguments in the order specified.
        This is a list-like operator.

    `Any1 >> [ Any2 Any3 ...]` matches if Any1 matches and has children at any sublevel
        that include Any2, Any3 *and* other given arguments in the order specified.
        This is a list-like operator.

    `[ Any1 Any2 ]` matches any node sequence that starts with the two given items.
        It does not matter whether the sequence contains more items.

    `[ Any1 Any2 $ ]` matches only sequences where Any1 and Any2 match and there are
        no further nodes in the sequence. The end marker $ must stand on its own,
        since $ is also part of tags such as PRP$.

    `[ Any1 .* Any2 $ ]` matches only sequences that start with Any1 and end with Any2

    NOTE: The repeating operators * + ? are meaningless within { sets }; their
        presence will cause an exception.


    Examples:
    ---------

    All sentences having verb phrases with a noun phrase object:

    `S >> { VP > { NP } }`

    The same, binding the object to the name obj:

    `S >> { VP > { NP=obj } }`

"""

from typing import (
    Callable,
    Dict,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Tuple,
    Union,
    cast,
    TYPE_CHECKING,
)

import re

if TYPE_CHECKING:
    from .trees import Tree

ContextFunc = Callable[["Tree"], Union[bool, str]]
ContextDict = Dict[str, Union[str, ContextFunc]]
ItemList = List[Union["_NestedList", str]]
Bindings = Dict[str, "Tree"]


class TreeMatch(NamedTuple):

    """ The result of a successful match: the matched node,
        and the nodes bound to names in the pattern """

    node: "Tree"
    names: Bindings


class _NestedList(list):

    """ Quick-and-dirty container for nested lists """

    def __init__(self, kind: str, content: ItemList) -> None:
        self._kind = kind
        super().__init__()
        if kind == "(":
            # Validate a ( x | y | z ...) construct
            if any(content[i] != "|" for i in range(1, len(content), 2)):
                raise ValueError("Missing '|' in pattern")
        super().extend(content)

    @property
    def kind(self) -> str:
        return self._kind

    def __repr__(self) -> str:
        return "<Nested('{0}') ".format(self._kind) + super().__repr__() + ">"


# Reserved strings in matching expressions
_NOT_ITEMS = frozenset((">", "*", "+", "?", "[", "(", "{", "]", ")", "}", "$"))

# A name binding at the end of an item, as in NP=subj
_NAME_RE = re.compile(r"^(.+)=([A-Za-z_]\w*)$")
# A name binding following a split-off item, as in .=any
_BARE_NAME_RE = re.compile(r"^=[A-Za-z_]\w*$")


def split_name(item: str) -> Tuple[str, Optional[str]]:
    """ Split an item into its pattern part and the name it binds, if any """
    m = _NAME_RE.match(item)
    if m is None:
        return item, None
    return m.group(1), m.group(2)


def _literal_done(s: str) -> bool:
    """ Is s a complete literal, possibly followed by a name binding? """
    lit = split_name(s)[0]
    start = 2 if lit.startswith("@") else 1
    return len(lit) > start and lit.endswith('"')


class _CompiledPattern:

    """ This class encapsulates a matching pattern that has
        been parsed into a nested list of matching items """

    _NEST = {"(": ")", "[": "]", "{": "}"}
    _FINISHERS = frozenset(_NEST.values())

    _pattern_cache: Dict[str, "_CompiledPattern"] = dict()

    @classmethod
    def compile(cls, pattern: str) -> "_CompiledPattern":
        """ Check whether we've parsed this pattern before, and if so,
            re-use the result """
        if pattern in cls._pattern_cache:
            return cls._pattern_cache[pattern]
        # Not already in cache: compile the pattern and cache it
        cp = cls._pattern_cache[pattern] = cls(pattern)
        return cp

    def __init__(self, pattern: str) -> None:
        self._items = self._compile(pattern)

    @property
    def items(self) -> ItemList:
        """ Return the embedded nested list of matching items """
        return self._items

    def _compile(self, pattern: str) -> ItemList:
        """ Compile a matching pattern into a nested list of matching items """

        NEST = self._NEST
        FINISHERS = self._FINISHERS

        def nest(items: List[str]) -> ItemList:
            """ Convert any embedded subpatterns, delimited by NEST entries,
                into nested lists """
            len_items = len(items)
            i = 0
            while i < len_items:
                # Look for symbols that open a nested structure
                item1 = items[i]
                finisher = NEST.get(item1)
                if finisher is not None:
                    # item1 is an opening symbol for a nested structure,
                    # finishing with the finisher symbol
                    j = i + 1
                    stack = 0
                    while j < len_items:
                        item2 = items[j]
                        if item2 == finisher:
                            if stack > 0:
                                # Finishing a nested occurrence of the
                                # same opening symbol
                                stack -= 1
                            else:
                                # Finishing the sequence started by the
                                # current opening symbol
                                nested = _NestedList(item1, nest(items[i + 1 : j]))
                                # Check for nesting errors
                                for n in nested:
                                    if isinstance(n, str) and n in FINISHERS:
                                        raise ValueError(
                                            "Mismatched '{0}' in pattern".format(n)
                                        )
                                # Assemble the resulting nested list
                                items = (
                                    items[0:i]
                                    + cast(List[str], [nested])
                                    + items[j + 1 :]
                                )
                                len_items = len(items)
                                # ...and continue the outer loop
                                break
                        elif item2 == item1:
                            # Nested occurrence of the same opening symbol
                            stack += 1
                        j += 1
                    else:
                        # Did not find the starting symbol again
                        raise ValueError("Mismatched '{0}' in pattern".format(item1))
                elif isinstance(item1, str) and item1 in FINISHERS:
                    raise ValueError("Mismatched '{0}' in pattern".format(item1))
                i += 1
            return cast(ItemList, items)

        def gen1() -> Iterator[str]:
            """ First generator: yield non-null strings from a
                regex split of the pattern """
            for item in re.split(r"\s+|([\.\|\(\)\{\}\[\]\*\+\?\>])", pattern):
                if item:
                    yield item

        def gen2() -> Iterator[str]:
            gen = gen1()
            while True:
                try:
                    item = next(gen)
                except StopIteration:
                    # Generators should not raise StopIteration,
                    # so we just break out of the loop normally
                    break
                if item.startswith(('"', '@"')):
                    # String literal item: merge with subsequent items
                    # until we encounter a matching end quote, which
                    # may be followed by a name binding.
                    # Literals have the forms "literal" and @"literal".
                    # The latter only matches leaves, while the former
                    # can match an entire subtree.
                    s = item
                    while not _literal_done(s):
                        try:
                            item = next(gen)
                        except StopIteration:
                            raise ValueError("Unterminated literal in pattern")
                        s += " " + item
                    if len(split_name(s)[0]) < (4 if s.startswith("@") else 3):
                        raise ValueError("Malformed literal in pattern")
                    yield s
                else:
                    yield item

        def gen3() -> Iterator[str]:
            """ Attach name bindings to the items that precede them """
            prev: Optional[str] = None
            for item in gen2():
                if _BARE_NAME_RE.match(item):
                    if prev is None or prev in _NOT_ITEMS or prev == "|":
                        raise ValueError("Misplaced name '{0}' in pattern".format(item))
                    prev += item
                    continue
                if prev is not None:
                    yield prev
                prev = item
            if prev is not None:
                yield prev

        return nest(list(gen3()))


def _deep_children(tree: "Tree") -> Iterator[Iterator["Tree"]]:
    """ Generator of generators of children of a tree and its subtrees """
    yield iter(tree.children)
    for ch in tree.children:
        yield from _deep_children(ch)


def single_match(
    item: Union[str, _NestedList], tree: "Tree", context: ContextDict
) -> bool:
    """ Does the subtree match with item, in and of itself? """
    if isinstance(item, _NestedList):
        if item.kind == "(":
            # A list of choices separated by '|': OR
            return any(
                single_match(item[i], tree, context) for i in range(0, len(item), 2)
            )
        return False
    assert isinstance(item, str)
    item, _ = split_name(item)
    if context and item.startswith("%"):
        # The item has the form %identifier (it's a macro-type item):
        # Look it up in the context dictionary, which can either return a
        # string directly, or a function to call with the tree
        # as an argument. This function can either return a bool result, or
        # a string that we use for the item.
        result: Union[None, str, bool, ContextFunc] = context.get(item[1:])
        if callable(result):
            # The macro resolves to a function: call it with the tree as an argument
            result = result(tree)
            if isinstance(result, bool):
                # The function yielded a bool result: return it
                return result
        if result is None:
            raise ValueError("Macro '{0}' not found in context".format(item[1:]))
        if not isinstance(result, str):
            raise ValueError(
                "Macro '{0}' must yield a callable or string".format(item[1:])
            )
        # Use the string retrieved from the context as the item to match
        item = result
    if item in _NOT_ITEMS:
        raise ValueError("Spurious '{0}' in pattern".format(item))
    if item == ".":
        # Wildcard: always matches
        return True
    if item.startswith('@"'):
        # @ + double quote: literal string, matching a leaf only
        if not tree.is_leaf:
            return False
        # Note that this is a case-neutral compare
        return item[2:-1].casefold() == tree.text.casefold()
    if item.startswith('"'):
        # Double quote: literal string
        # Note that this is a case-neutral compare
        return item[1:-1].casefold() == tree.text.casefold()
    if tree.is_leaf:
        # Categories never match words
        return False
    # Check nonterminal tag
    # NP matches NP as well as NP-SBJ, etc.,
    # while NP-SBJ only matches NP-SBJ
    return tree.match_tag(item)


def bind(item: Union[str, _NestedList], tree: "Tree", names: Bindings) -> None:
    """ Bind the tree to the name given in the item, if any """
    if isinstance(item, str):
        _, name = split_name(item)
        if name is not None:
            names[name] = tree


def unpack(items: ItemList, ix: int) -> Tuple[Union[_NestedList, ItemList], str]:
    """ Unpack an argument for the '>' or '>>' containment operators.
        These are usually lists or sets but may be single items, in
        which case they are interpreted as a set having
        that single item only. """
    item = items[ix]
    if isinstance(item, _NestedList) and item.kind in {"[", "{"}:
        return item, item.kind
    return items[ix : ix + 1], "{"  # Single item: assume set


def contained(
    tree: "Tree",
    items: ItemList,
    pc: int,
    deep: bool,
    context: ContextDict,
    names: Bindings,
) -> bool:
    """ Returns True if the tree has children that match the subsequence
        in items[pc], either directly (deep = False) or at any deeper
        level (deep = True) """
    subseq, kind = unpack(items, pc)
    if kind == "[":
        f_run = run_sequence
    elif kind == "{":
        f_run = run_set
    else:
        assert False
        return False
    # Deep containment: iterate through the children of every
    # subtree; bindings are only kept from a successful attempt
    gens = _deep_children(tree) if deep else iter([iter(tree.children)])
    for gen_children in gens:
        trial = dict(names)
        if f_run(gen_children, subseq, context, trial):
            names.update(trial)
            return True
    return False


def run_sequence(
    gen: Iterator["Tree"], items: ItemList, context: ContextDict, names: Bindings
) -> bool:
    """ Match the child nodes of gen with the items, in sequence """
    len_items = len(items)
    # Program counter (index into items)
    pc = 0
    try:
        tree = next(gen)
        while pc < len_items:
            item = items[pc]
            pc += 1
            repeat: Optional[str] = None
            stopper: Optional[str] = None
            if pc < len_items:
                if items[pc] in {"*", "+", "?", ">"}:
                    # Repeat specifier
                    repeat = cast(str, items[pc])
                    pc += 1
                    if (
                        isinstance(item, str)
                        and split_name(item)[0] == "."
                        and repeat in {"*", "+", "?"}
                    ):
                        # Limit wildcard repeats if the following item
                        # is concrete, i.e. non-wildcard and non-end
                        if pc < len_items:
                            ipc = items[pc]
                            if isinstance(ipc, _NestedList):
                                if ipc.kind == "(":
                                    stopper = cast(str, ipc)
                            elif ipc not in {".", "$"}:
                                stopper = cast(str, ipc)
            if item == "$":
                # Only matches at the end of the list
                result = pc >= len_items
            else:
                result = single_match(item, tree, context)
            if repeat is None:
                # Plain item-for-item match
                if not result:
                    return False
                bind(item, tree, names)
                tree = next(gen)
            elif repeat == "+":
                if not result:
                    return False
                while result:
                    bind(item, tree, names)
                    tree = next(gen)
                    if stopper is not None:
                        result = not single_match(stopper, tree, context)
                    else:
                        result = single_match(item, tree, context)
            elif repeat == "*":
                if stopper is not None:
                    result = not single_match(stopper, tree, context)
                while result:
                    bind(item, tree, names)
                    tree = next(gen)
                    if stopper is not None:
                        result = not single_match(stopper, tree, context)
                    else:
                        result = single_match(item, tree, context)
            elif repeat == "?":
                if stopper is not None:
                    result = not single_match(stopper, tree, context)
                if result:
                    bind(item, tree, names)
                    tree = next(gen)
            elif repeat == ">":
                if not result:
                    # No containment if the head item does not match
                    return False
                op = ">"
                if pc < len_items and items[pc] == ">":
                    # '>>' operator: arbitrary depth containment
                    pc += 1
                    op = ">>"
                if pc >= len_items:
                    raise ValueError("Missing argument to '{0}' operator".format(op))
                result = contained(tree, items, pc, op == ">>", context, names)
                if not result:
                    return False
                bind(item, tree, names)
                pc += 1
                tree = next(gen)
    except StopIteration:
        # Skip any nullable items
        # Not a set, since items[] may be non-hashable
        while pc + 1 < len_items and items[pc + 1] in ("*", "?"):
            item = items[pc]
            # Do error checking while we're at it
            if isinstance(item, str) and item in _NOT_ITEMS:
                raise ValueError("Spurious '{0}' in pattern".format(item))
            pc += 2
        if pc < len_items:
            if items[pc] == "$":
                # Iteration done: move past the end-of-list marker, if any
                pc += 1
        else:
            if pc > 0 and items[pc - 1] == "$":
                # Gone too far: back up
                pc -= 1
    else:
        if len_items and items[-1] == "$":
            # Found end marker but the child iterator is not
            # complete: return False
            return False
    return pc >= len_items


def run_set(
    gen: Iterator["Tree"], items: ItemList, context: ContextDict, names: Bindings
) -> bool:
    """ Run through the subtrees (children) yielded by gen,
        matching them set-wise (unordered) with the items.
        If all items are eventually matched, return True,
        otherwise False. """
    len_items = len(items)
    # Keep a set of items that have not yet been matched
    # by one or more tree nodes
    unmatched = set(range(len_items))
    for tree in gen:
        pc = 0
        while pc < len_items:
            item_pc = pc
            item = items[pc]
            pc += 1
            result = single_match(item, tree, context)
            trial = names
            if pc < len_items and items[pc] == ">":
                # Containment: Not a match unless the children match as well
                pc += 1
                op = ">"
                if pc < len_items and items[pc] == ">":
                    # Deep match
                    op = ">>"
                    pc += 1
                if pc >= len_items:
                    raise ValueError("Missing argument to '{0}' operator".format(op))
                if result:
                    # Further constrained by containment
                    trial = dict(names)
                    result = contained(tree, items, pc, op == ">>", context, trial)
                pc += 1
                # Always cut away the 'dummy' extra items corresponding
                # to the '>' (or '>>') and its argument
                unmatched -= {pc - 1, pc - 2}
                if op == ">>":
                    unmatched -= {pc - 3}
            if result and item_pc in unmatched:
                # We have a match
                if trial is not names:
                    names.update(trial)
                bind(item, tree, names)
                unmatched -= {item_pc}
            if not unmatched:
                # We have a complete match already: Short-circuit
                return True
    # Return True if all items got matched at some point
    # by a tree node, otherwise False
    return False


def match_pattern(
    tree: "Tree", pattern: str, context: Optional[ContextDict] = None
) -> Optional[TreeMatch]:
    """ Return the result of a pattern match on a Tree instance:
        a TreeMatch if the tree matches, otherwise None """
    cp = _CompiledPattern.compile(pattern)
    names: Bindings = {}
    if run_set(iter([tree]), cp.items, context or {}, names):
        return TreeMatch(tree, names)
    return None


def all_matches(
    tree: "Tree", pattern: str, context: Optional[ContextDict] = None
) -> Iterator[TreeMatch]:
    """ Return all matches of the pattern at subtree roots, including
        the tree itself, in pre-order """
    for subtree in tree.subtrees:
        m = match_pattern(subtree, pattern, context)
        if m is not None:
            yield m


def first_match(
    tree: "Tree", pattern: str, context: Optional[ContextDict] = None
) -> Optional[TreeMatch]:
    """ Return the first match of the pattern within the tree,
        or None if there is none """
    return next(all_matches(tree, pattern, context), None)


def top_matches(
    tree: "Tree", pattern: str, context: Optional[ContextDict] = None
) -> Iterator[TreeMatch]:
    """ Return all matches at subtree roots, including the tree itself,
        but not recursively, i.e. we don't include matches within matches """
    m = match_pattern(tree, pattern, context)
    if m is not None:
        yield m
    else:
        for child in tree.children:
            yield from top_matches(child, pattern, context)


def match(tree: "Tree", pattern: str, context: Optional[ContextDict] = None) -> bool:
    """ Return True if the tree matches the given pattern """
    return match_pattern(tree, pattern, context) is not None
