"""
    Arborist: Head finding, normalization and surgery for parse trees

    Package initialization

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

    This module exposes the Arborist API, i.e. the identifiers that are
    directly accessible via the arborist module object after importing it.

"""

# Expose the Arborist API

from .basics import ConfigError
from .trees import Label, Tree, read_trees
from .treebank import TreebankLanguagePack, PennTreebankLanguagePack
from .headrules import Direction, HeadRule, RuleTable, make_rule_table
from .headfinder import (
    HeadFinder,
    HeadFinderHooks,
    CollinsHooks,
    CollinsHeadFinder,
    ModCollinsHeadFinder,
)
from .normalizer import TreeNormalizer, BobChrisTreeNormalizer
from .matcher import TreeMatch, match_pattern, all_matches, first_match, top_matches
from .tsurgeon import (
    AuxiliaryTree,
    CoindexationGenerator,
    TsurgeonPattern,
    FetchNode,
    AdjoinNode,
    AdjoinToHeadNode,
    AdjoinToFootNode,
    TsurgeonProgram,
    process_pattern,
)
from .dependency import (
    UnnamedDependency,
    NamedDependency,
    DependencyFactory,
    NamedDependencyFactory,
    UNNAMED_FACTORY,
    NAMED_FACTORY,
    dependencies,
)
from .settings import Settings, HeadRules
from .version import __version__

__author__ = "Miðeind ehf."
__copyright__ = "(C) 2021 Miðeind ehf."

__all__ = (
    "ConfigError",
    "Label",
    "Tree",
    "read_trees",
    "TreebankLanguagePack",
    "PennTreebankLanguagePack",
    "Direction",
    "HeadRule",
    "RuleTable",
    "make_rule_table",
    "HeadFinder",
    "HeadFinderHooks",
    "CollinsHooks",
    "CollinsHeadFinder",
    "ModCollinsHeadFinder",
    "TreeNormalizer",
    "BobChrisTreeNormalizer",
    "TreeMatch",
    "match_pattern",
    "all_matches",
    "first_match",
    "top_matches",
    "AuxiliaryTree",
    "CoindexationGenerator",
    "TsurgeonPattern",
    "FetchNode",
    "AdjoinNode",
    "AdjoinToHeadNode",
    "AdjoinToFootNode",
    "TsurgeonProgram",
    "process_pattern",
    "UnnamedDependency",
    "NamedDependency",
    "DependencyFactory",
    "NamedDependencyFactory",
    "UNNAMED_FACTORY",
    "NAMED_FACTORY",
    "dependencies",
    "Settings",
    "HeadRules",
    "__version__",
    "__author__",
    "__copyright__",
)

Settings.read("config/Arborist.conf")
