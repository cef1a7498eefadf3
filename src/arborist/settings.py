"""
    Arborist: Head finding, normalization and surgery for parse trees

    Settings module

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


    This module reads and interprets the Arborist.conf
    configuration file. The file can include other files using the $include
    directive, making it easier to arrange configuration sections into logical
    and manageable pieces.

    Sections are identified like so: [ section_name ]

    Comments start with # signs.

    Sections are interpreted by section handlers. Each head rule table
    has its own section, where every line has the form

        CAT : mode c1 c2 ... ; mode c1 ...

    giving the directive lists of category CAT in the order in which they
    are tried. A line of the form 'default = mode c1 ...' sets the rule
    used for categories that have no line of their own.

    The [avoid] section has lines of the form 'table : c1 c2 ...' giving
    the categories that the last-resort search of a table should avoid.

"""

from typing import (
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    Optional,
    Union,
)

import logging
import threading

from .basics import ConfigError, LineReader, ROOT_LABEL
from .headrules import HeadRule, RuleTable, parse_rules


class HeadRules:

    """ Wrapper around the head rule tables, keyed by table name """

    TABLES: Dict[str, RuleTable] = {}
    AVOID: Dict[str, FrozenSet[str]] = {}
    DEFAULTS: Dict[str, HeadRule] = {}

    @staticmethod
    def clear() -> None:
        HeadRules.TABLES = {}
        HeadRules.AVOID = {}
        HeadRules.DEFAULTS = {}

    @staticmethod
    def add(table: str, cat: str, rules: Iterable[HeadRule]) -> None:
        """ Add the head rules of a category to a table.
            Called from the config file handler. """
        t = HeadRules.TABLES.setdefault(table, {})
        if cat in t:
            raise ConfigError(
                "Head rules for '{0}' defined more than once in [{1}]".format(
                    cat, table
                )
            )
        t[cat] = tuple(rules)

    @staticmethod
    def set_default(table: str, rule: HeadRule) -> None:
        HeadRules.TABLES.setdefault(table, {})
        HeadRules.DEFAULTS[table] = rule

    @staticmethod
    def set_avoid(table: str, cats: Iterable[str]) -> None:
        HeadRules.AVOID[table] = frozenset(cats)

    @staticmethod
    def table(name: str) -> RuleTable:
        """ Return the rule table having the given name """
        try:
            return HeadRules.TABLES[name]
        except KeyError:
            raise ConfigError("Unknown head rule table '{0}'".format(name))

    @staticmethod
    def avoid(name: str) -> Optional[FrozenSet[str]]:
        """ Return the categories to avoid for the given table,
            or None if the configuration does not specify them """
        return HeadRules.AVOID.get(name)

    @staticmethod
    def default(name: str) -> Optional[HeadRule]:
        return HeadRules.DEFAULTS.get(name)


class Settings:

    """ Global settings """

    _lock = threading.Lock()
    loaded: bool = False
    DEBUG: bool = False
    ROOT_LABEL: str = ROOT_LABEL

    # Head rule table sections in the configuration files
    TABLE_SECTIONS = frozenset(("collins", "modcollins"))

    # Configuration settings from the Arborist.conf file

    @staticmethod
    def _handle_settings(s: str) -> None:
        """ Handle config parameters in the settings section """
        a = s.split("=", maxsplit=1)
        if len(a) != 2:
            raise ConfigError("Expected parameter = value but got '{0}'".format(s))
        par = a[0].strip().lower()
        sval = a[1].strip()
        val: Union[None, str, bool] = sval
        if sval.lower() == "none":
            val = None
        elif sval.lower() == "true":
            val = True
        elif sval.lower() == "false":
            val = False
        if par == "debug":
            if not isinstance(val, bool):
                raise ConfigError("Invalid parameter value: {0} = {1}".format(par, val))
            Settings.DEBUG = val
        elif par == "root_label":
            if not isinstance(val, str) or not val:
                raise ConfigError("Invalid parameter value: {0} = {1}".format(par, val))
            Settings.ROOT_LABEL = val
        else:
            raise ConfigError("Unknown configuration parameter '{0}'".format(par))

    @staticmethod
    def _handle_head_rules(table: str, s: str) -> None:
        """ Handle a head rule line within a table section """
        # Format: default = mode c1 c2 ...
        a = s.split("=", maxsplit=1)
        if len(a) == 2:
            par = a[0].strip().lower()
            if par != "default":
                raise ConfigError("Unknown setting '{0}' in [{1}]".format(par, table))
            HeadRules.set_default(table, HeadRule.from_text(a[1]))
            return
        # Format: CAT : mode c1 c2 ... ; mode c1 ...
        # Note that the first colon is the separator, as ':' is also a category
        a = s.split(":", maxsplit=1)
        if len(a) != 2:
            raise ConfigError("Expected 'CAT : rules' but got '{0}'".format(s))
        cat = a[0].strip()
        if not cat or len(cat.split()) != 1:
            raise ConfigError("Invalid category '{0}' in head rules".format(cat))
        HeadRules.add(table, cat, parse_rules(a[1]))

    @staticmethod
    def _handle_avoid(s: str) -> None:
        """ Handle the categories to avoid in last-resort head searches """
        # Format: table : c1 c2 ...
        a = s.split(":", maxsplit=1)
        if len(a) != 2:
            raise ConfigError("Expected 'table : categories' but got '{0}'".format(s))
        table = a[0].strip().lower()
        if table not in Settings.TABLE_SECTIONS:
            raise ConfigError("Unknown head rule table '{0}' in [avoid]".format(table))
        HeadRules.set_avoid(table, a[1].split())

    @staticmethod
    def _table_handler(table: str) -> Callable[[str], None]:
        return lambda s: Settings._handle_head_rules(table, s)

    @staticmethod
    def read(
        fname: str = "config/Arborist.conf", force: bool = False, from_package: bool = True
    ) -> None:
        """ Read configuration file. If from_package is False,
            fname is taken to be a path in the file system. """

        with Settings._lock:

            if Settings.loaded and not force:
                return

            CONFIG_HANDLERS: Dict[str, Callable[[str], None]] = {
                "settings": Settings._handle_settings,
                "avoid": Settings._handle_avoid,
            }
            for table in Settings.TABLE_SECTIONS:
                CONFIG_HANDLERS[table] = Settings._table_handler(table)
            handler: Optional[Callable[[str], None]] = None  # Current section handler

            HeadRules.clear()
            Settings.DEBUG = False
            Settings.ROOT_LABEL = ROOT_LABEL

            rdr: Optional[LineReader] = None
            try:
                rdr = LineReader(fname, package_name=__package__ if from_package else None)
                for s in rdr.lines():
                    # Ignore comments
                    ix = s.find("#")
                    if ix >= 0:
                        s = s[0:ix]
                    s = s.strip()
                    if not s:
                        # Blank line: ignore
                        continue
                    if s[0] == "[" and s[-1] == "]":
                        # New section
                        section = s[1:-1].strip().lower()
                        if section in CONFIG_HANDLERS:
                            handler = CONFIG_HANDLERS[section]
                            continue
                        raise ConfigError("Unknown section name '{0}'".format(section))
                    if handler is None:
                        raise ConfigError("No handler for config line '{0}'".format(s))
                    # Call the correct handler depending on the section
                    try:
                        handler(s)
                    except ConfigError as e:
                        # Add file name and line number information to the exception
                        # if it's not already there
                        e.set_pos(rdr.fname(), rdr.line())
                        raise e

            except ConfigError as e:
                # Add file name and line number information to the exception
                # if it's not already there
                if rdr:
                    e.set_pos(rdr.fname(), rdr.line())
                raise e

            if Settings.DEBUG:
                logging.getLogger(__package__).setLevel(logging.DEBUG)

            Settings.loaded = True
