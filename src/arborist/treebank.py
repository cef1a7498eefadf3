"""
    Arborist: Head finding, normalization and surgery for parse trees

    Treebank language pack module

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

    A treebank language pack bundles the facts about a treebank's label
    conventions that the rest of the package needs: how to reduce a raw
    label such as NP-SBJ-2 or NP=3 to its basic category (NP), which
    part-of-speech tags are punctuation, and what the root is called.

    basic_category() is a pure function of its argument. Labels that
    start with an annotation character, such as -NONE- and -LRB-, keep
    their leading part up to the matching closing character.

"""

from typing import FrozenSet, Optional

from .cache import LFU_Cache
from .settings import Settings


class TreebankLanguagePack:

    """ Base class for treebank label conventions """

    # Characters that introduce annotations on a category label
    ANNOTATION_CHARS: FrozenSet[str] = frozenset(("-", "=", "|", "#", "^", "~", "_"))
    # Part-of-speech tags of punctuation tokens
    PUNCTUATION_TAGS: FrozenSet[str] = frozenset()

    def __init__(self) -> None:
        Settings.read()
        self._cache = LFU_Cache()

    @property
    def punctuation_tags(self) -> FrozenSet[str]:
        return self.PUNCTUATION_TAGS

    @property
    def start_symbol(self) -> str:
        """ The category of the root node, as configured """
        return Settings.ROOT_LABEL

    def is_punctuation_tag(self, tag: Optional[str]) -> bool:
        return tag in self.PUNCTUATION_TAGS

    def post_basic_category_index(self, category: str) -> int:
        """ Return the index of the first character in category that
            is not part of its basic category """
        saw_at_zero = False
        seen_at_zero = ""
        i = 0
        for i, ch in enumerate(category):
            if ch in self.ANNOTATION_CHARS:
                if i == 0:
                    saw_at_zero = True
                    seen_at_zero = ch
                elif saw_at_zero and ch == seen_at_zero:
                    # Closing character of a label such as -NONE-
                    saw_at_zero = False
                else:
                    return i
        return len(category)

    def _basic_category(self, category: str) -> str:
        return category[0 : self.post_basic_category_index(category)]

    def basic_category(self, category: Optional[str]) -> Optional[str]:
        """ Return the basic category of a label, i.e. the label
            stripped of functional tags, indices and other annotations """
        if category is None:
            return None
        return self._cache.lookup(category, self._basic_category)


class PennTreebankLanguagePack(TreebankLanguagePack):

    """ Label conventions of the Penn (English) Treebank """

    PUNCTUATION_TAGS = frozenset(("''", "``", "-LRB-", "-RRB-", ".", ":", ","))
