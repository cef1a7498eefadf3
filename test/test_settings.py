"""

    test_settings.py

    Tests for reading the configuration files in settings.py

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

import logging

import pytest

from arborist import (
    BobChrisTreeNormalizer,
    CollinsHeadFinder,
    ConfigError,
    Direction,
    HeadRule,
    HeadRules,
    ModCollinsHeadFinder,
    Settings,
    Tree,
)
from arborist.basics import LineReader


@pytest.fixture(autouse=True)
def restore_settings():
    """ Reload the standard configuration after each test """
    yield
    Settings.read(force=True)
    logging.getLogger("arborist").setLevel(logging.NOTSET)


def write_config(tmp_path, name: str, txt: str) -> str:
    path = tmp_path / name
    path.write_text(txt, encoding="utf-8")
    return str(path)


def read_config(tmp_path, txt: str) -> None:
    Settings.read(write_config(tmp_path, "test.conf", txt), force=True, from_package=False)


def test_standard_tables() -> None:
    assert Settings.loaded
    assert not Settings.DEBUG
    assert Settings.ROOT_LABEL == "ROOT"
    collins = HeadRules.table("collins")
    assert collins["LST"] == (HeadRule(Direction.RIGHT, ("LS", ":")),)
    assert "WP$" in collins["WHNP"][0].categories
    # Continuation lines
    assert len(collins["NP"]) == 5
    assert collins["NP"][1] == HeadRule(Direction.LEFT, ("NP",))
    assert collins["NP"][4] == HeadRule(Direction.RIGHTDIS, ("JJ", "JJS", "RB", "QP"))
    assert len(HeadRules.table("modcollins")["NP"]) == 6
    assert HeadRules.avoid("collins") is None
    assert HeadRules.default("collins") is None
    with pytest.raises(ConfigError):
        HeadRules.table("nosuch")


def test_custom_config(tmp_path) -> None:
    write_config(
        tmp_path,
        "rules.conf",
        "[collins]\n"
        "default = rightexcept PUNCT   # Unknown categories\n"
        "S : left VP ; \\\n"
        "    right\n"
        "\n"
        "[avoid]\n"
        "collins : PUNCT\n",
    )
    read_config(
        tmp_path,
        "# A custom configuration\n"
        "[settings]\n"
        "debug = true\n"
        "root_label = TOP\n"
        "$include rules.conf\n",
    )
    assert Settings.DEBUG
    assert logging.getLogger("arborist").level == logging.DEBUG
    assert Settings.ROOT_LABEL == "TOP"
    assert HeadRules.table("collins") == {
        "S": (HeadRule(Direction.LEFT, ("VP",)), HeadRule(Direction.RIGHT)),
    }
    with pytest.raises(ConfigError):
        HeadRules.table("modcollins")
    with pytest.raises(ConfigError):
        ModCollinsHeadFinder()
    hf = CollinsHeadFinder()
    assert hf.default_rule == HeadRule(Direction.RIGHTEXCEPT, ("PUNCT",))
    assert hf.default_right_rule == HeadRule(Direction.RIGHTEXCEPT, ("PUNCT",))
    t = Tree.from_bracketed("(NP (DT the) (NN dog) (PUNCT .))")
    assert hf.determine_head(t) is t.child(1)
    t = Tree.from_bracketed("(S (NP (NN x)) (VP (VB y)))")
    assert hf.determine_head(t) is t.child(1)
    assert BobChrisTreeNormalizer().normalize_nonterminal(None) == "TOP"


def error_for(tmp_path, txt: str) -> ConfigError:
    with pytest.raises(ConfigError) as e:
        read_config(tmp_path, txt)
    return e.value


def test_errors(tmp_path) -> None:
    fname = str(tmp_path / "test.conf")
    e = error_for(tmp_path, "[collins]\nNP : sideways NN\n")
    assert e.fname == fname
    assert e.line == 2
    assert str(e) == "File {0}, line 2: Invalid head rule direction 'sideways'".format(
        fname
    )
    e = error_for(tmp_path, "\n[nosuch]\n")
    assert e.line == 2
    assert "nosuch" in str(e)
    e = error_for(tmp_path, "[collins]\nNP : left NN\nNP : right NN\n")
    assert e.line == 3
    assert "more than once" in str(e)
    e = error_for(tmp_path, "[collins]\nNP left NN\n")
    assert e.line == 2
    e = error_for(tmp_path, "[collins]\nNP : left NN ;\n")
    assert e.line == 2
    e = error_for(tmp_path, "[collins]\nsomething = left\n")
    assert e.line == 2
    e = error_for(tmp_path, "NP : left NN\n")
    assert e.line == 1
    e = error_for(tmp_path, "[settings]\ndebug = maybe\n")
    assert e.line == 2
    e = error_for(tmp_path, "[settings]\n\ncolor = blue\n")
    assert e.line == 3
    assert "color" in str(e)
    e = error_for(tmp_path, "[avoid]\nnosuch : PUNCT\n")
    assert e.line == 2
    # Errors in included files refer to the included file
    write_config(tmp_path, "bad.conf", "[collins]\n\nNP : left NN ; upward\n")
    e = error_for(tmp_path, "[settings]\ndebug = false\n$include bad.conf\n")
    assert e.fname == str(tmp_path / "bad.conf")
    assert e.line == 3
    # A missing include file is reported at the $include line
    e = error_for(tmp_path, "[settings]\n$include missing.conf\n")
    assert e.fname == fname
    assert e.line == 2
    assert "missing.conf" in str(e)
    with pytest.raises(ConfigError):
        Settings.read(str(tmp_path / "nosuch.conf"), force=True, from_package=False)


def test_package_resources() -> None:
    # Resource files are looked up in the given package
    rdr = LineReader("config/Arborist.conf", package_name="arborist")
    lines = list(rdr.lines())
    assert "[settings]" in [s.strip() for s in lines]
    # The $include directive pulls in the head rule tables
    assert any(s.strip() == "[collins]" for s in lines)
    rdr = LineReader("config/Arborist.conf", package_name="nosuch_package")
    with pytest.raises(ModuleNotFoundError):
        list(rdr.lines())
