#! /usr/bin/env python3
"""
Copyright (C) 2011 by Peter A. Donis.
Released under the open source MIT license:
http://www.opensource.org/licenses/MIT

A suspended computation that is performed at most once. The
first time a ``Thunk`` is forced (i.e., called), it runs its
recipe and caches the result; every later call simply returns
the cached value.

This class was written for use by the ``PowerSeries`` class,
where each series node keeps its tail as a thunk, but the
implementation is general.

Typical usage:

    >>> def recipe():
    ...     print("Computing")
    ...     return 42
    ...
    >>> t = Thunk(recipe)
    >>> t.forced
    False
    >>> t()
    Computing
    42
    >>> t.forced
    True
    >>> t()
    42

A recipe that forces its own thunk can never produce a value,
so instead of recursing until the stack runs out we fail fast:

    >>> t = Thunk(lambda: t() + 1)
    >>> t()  # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
    ...
    ConstructionOrderError: Thunk was forced again while its own value was being computed.

A failed recipe leaves the thunk unforced, so forcing it again
retries the computation (and, since recipes are pure, fails the
same way):

    >>> t.forced
    False
    >>> def failing():
    ...     raise ValueError("no value")
    ...
    >>> f = Thunk(failing)
    >>> f()
    Traceback (most recent call last):
    ...
    ValueError: no value
    >>> f()
    Traceback (most recent call last):
    ...
    ValueError: no value

Two threads forcing the same thunk at once both run the recipe;
whichever finishes first supplies the cached value, and the other
thread gets that value too:

    >>> import threading
    >>> started, release = threading.Event(), threading.Event()
    >>> calls = []
    >>> def racing():
    ...     calls.append(len(calls))
    ...     if len(calls) == 1:
    ...         started.set()
    ...         release.wait(5)
    ...         return "first caller"
    ...     return "second caller"
    ...
    >>> r = Thunk(racing)
    >>> results = []
    >>> worker = threading.Thread(target=lambda: results.append(r()))
    >>> worker.start()
    >>> started.wait(5)
    True
    >>> r()
    'second caller'
    >>> release.set()
    >>> worker.join()
    >>> results, calls, r.forced
    (['second caller'], [0, 1], True)
    >>> r()
    'second caller'
"""

from threading import get_ident


class ConstructionOrderError(RuntimeError):
    """A lazy value was demanded before it could be defined."""
    pass


class Thunk(object):
    """Compute-once cache for a zero-argument recipe.

    The cell is either "unevaluated, with a recipe" or "evaluated,
    with a value"; forcing it makes the transition and drops the
    recipe so that whatever the recipe closed over can be reclaimed.

    Recipes are assumed to be pure. If two threads force the same
    thunk at once, both compute the value and the first one to
    finish is cached; re-entrant forcing is only detected within a
    single thread.
    """

    def __init__(self, recipe):
        self.__recipe = recipe
        self.__value = None
        self.__forced = False
        # Thread currently running the recipe, if any
        self.__forcing = None

    @property
    def forced(self):
        return self.__forced

    def __call__(self):
        if self.__forced:
            return self.__value
        me = get_ident()
        if self.__forcing == me:
            raise ConstructionOrderError(
                "Thunk was forced again while its own value was being computed.")
        recipe = self.__recipe
        if recipe is None:
            # Another thread finished forcing since the check above
            return self.__value
        self.__forcing = me
        try:
            value = recipe()
        finally:
            self.__forcing = None
        if not self.__forced:
            self.__value = value
            self.__forced = True
            self.__recipe = None
        return self.__value


if __name__ == '__main__':
    import doctest
    doctest.testmod()
