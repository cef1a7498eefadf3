"""

    cache.py

    Cache utility classes

    The LFU_Cache class herein is
    copyright (c) 2011 by Raymond Hettinger

    cf. http://code.activestate.com/recipes/498245-lru-and-lfu-cache-decorators/

    MIT license:

    Permission is hereby granted, free of charge, to any person obtaining a copy of
    this software and associated documentation files (the "Software"), to deal in
    the Software without restriction, including without limitation the rights to use,
    copy, modify, merge, publish, distribute, sublicense, and/or sell copies of the
    Software, and to permit persons to whom the Software is furnished to do so,
    subject to the following conditions:

    The above copyright notice and this permission notice shall be included
    in all copies or substantial portions of the Software.

    THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
    IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
    FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL
    THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
    LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
    OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
    IN THE SOFTWARE.

    ---

    The classes have been modified from their original versions,
    which are available from the URL given above. In Arborist, the
    LFU cache memoizes category label lookups, which are few in number
    but requested for every child of every node the head finder visits.

"""

from typing import Any, Callable, Dict, Tuple

from heapq import nsmallest
from operator import itemgetter
import threading


LFU_DEFAULT = 512


class LFU_Cache:

    """ Least-frequently-used (LFU) cache for label lookups.
        Based on a pattern by Raymond Hettinger
    """

    class Counter(dict):
        """ Mapping where default values are zero """
        def __missing__(self, key: Any) -> int:
            return 0

    def __init__(self, maxsize: int = LFU_DEFAULT) -> None:
        # Mapping of keys to results
        self.cache: Dict[Any, Any] = {}
        # Times each key has been accessed
        self.use_count = self.Counter()
        self.maxsize = maxsize
        self.hits = self.misses = 0
        self.lock = threading.Lock()

    def lookup(self, key: Any, func: Callable[[Any], Any]) -> Any:
        """ Lookup a key in the cache, calling func(key)
            to obtain the data if not already there """
        with self.lock:
            self.use_count[key] += 1
            try:
                result = self.cache[key]
                self.hits += 1
            except KeyError:
                result = func(key)
                self.cache[key] = result
                self.misses += 1

                # Purge the 10% least frequently used cache entries
                if len(self.cache) > self.maxsize:
                    for k, _ in nsmallest(
                        max(1, self.maxsize // 10),
                        self.use_count.items(),
                        key=itemgetter(1),
                    ):
                        self.cache.pop(k, None)
                        del self.use_count[k]

            return result

    @property
    def stats(self) -> Tuple[int, int]:
        """ Return a (hits, misses) tuple """
        return self.hits, self.misses


class cached_property:

    """ A decorator for caching properties of immutable instances """

    def __init__(self, func):
        self.__doc__ = getattr(func, "__doc__")
        self.func = func

    def __get__(self, obj, cls):
        if obj is None:
            return self
        # Get the property value and put it into the instance's
        # dict instead of the original function
        val = obj.__dict__[self.func.__name__] = self.func(obj)
        return val
