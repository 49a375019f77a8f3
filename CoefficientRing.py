#! /usr/bin/env python3
"""
Copyright (C) 2011 by Peter A. Donis.
Released under the open source MIT license:
http://www.opensource.org/licenses/MIT

Coefficient rings for power series. The ``PowerSeries`` class does
not care what its coefficients are, as long as it can add, negate,
multiply, divide and compare them, and knows which values are zero
and one. A ``CoefficientRing`` bundles exactly those capabilities;
every series carries the ring its coefficients live in, and all of
the series algorithms are written against this interface.

The default ring is the exact rationals, using the standard
library's ``Fraction`` type:

    >>> RATIONALS.zero, RATIONALS.one
    (Fraction(0, 1), Fraction(1, 1))
    >>> RATIONALS.div(RATIONALS.one, RATIONALS.coerce(3))
    Fraction(1, 3)

Plain numbers are coerced into the ring when they are used as
coefficients; floats are converted exactly, as the binary value
they actually hold:

    >>> RATIONALS.coerce(2)
    Fraction(2, 1)
    >>> RATIONALS.coerce(0.5)
    Fraction(1, 2)
    >>> RATIONALS.coerce("2")
    Traceback (most recent call last):
    ...
    TypeError: '2' is not a coefficient of the rationals.

The integers modulo a prime form a field too, so power series over
them support the same operations:

    >>> F7 = PrimeField(7)
    >>> F7.add(5, 4)
    2
    >>> F7.neg(3)
    4
    >>> F7.div(1, 3)
    5
    >>> F7.mul(F7.div(1, 3), 3)
    1
    >>> F7.coerce(-1)
    6
    >>> F7 == PrimeField(7), F7 == PrimeField(5)
    (True, False)

The modulus really does have to be prime, or some nonzero elements
have no inverse:

    >>> PrimeField(4)
    Traceback (most recent call last):
    ...
    ValueError: Modulus of a prime field must be a prime, not 4.

Division by zero is an error in any ring:

    >>> F7.div(1, 7)
    Traceback (most recent call last):
    ...
    ZeroDivisionError: Division by zero in GF(7).
"""

from fractions import Fraction
from math import isqrt


class CoefficientRing(object):
    """The operations a power series needs from its coefficients.

    The default implementations just use the Python operators, so
    any numeric type that supports them (and whose ``zero`` and
    ``one`` values are given) can be used directly; rings whose
    elements don't behave that way override the methods.

    The ``types`` argument lists the Python types that are accepted
    as coefficients by ``coerce``.
    """

    name = "ring"

    def __init__(self, zero, one, types=None, name=None):
        self.zero = zero
        self.one = one
        self.types = types or (type(zero),)
        if name:
            self.name = name

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.name)

    def iscoefficient(self, value):
        return isinstance(value, self.types)

    def coerce(self, value):
        """Return ``value`` as an element of this ring.

        Raises ``TypeError`` if ``value`` is not of a type this ring
        accepts as a coefficient.
        """
        if not self.iscoefficient(value):
            raise TypeError("%r is not a coefficient of %s." % (value, self.name))
        return value

    def add(self, a, b):
        return a + b

    def neg(self, a):
        return -a

    def sub(self, a, b):
        return self.add(a, self.neg(b))

    def mul(self, a, b):
        return a * b

    def div(self, a, b):
        if self.iszero(b):
            raise ZeroDivisionError("Division by zero in %s." % self.name)
        return a / b

    def eq(self, a, b):
        return a == b

    def iszero(self, a):
        return self.eq(a, self.zero)


class RationalField(CoefficientRing):
    """The exact rationals, represented as ``Fraction`` instances.

    Integers and floats are accepted as coefficients and converted
    to fractions; floats are converted exactly, so 0.1 becomes the
    binary fraction it really is rather than 1/10.
    """

    def __init__(self):
        CoefficientRing.__init__(self, Fraction(0, 1), Fraction(1, 1),
                                 (int, float, Fraction), "the rationals")

    def coerce(self, value):
        value = CoefficientRing.coerce(self, value)
        if isinstance(value, float):
            return Fraction.from_float(value)
        return Fraction(value)


class PrimeField(CoefficientRing):
    """The integers modulo a prime ``p``.

    Elements are plain ints in ``range(p)``; division multiplies by
    the modular inverse, which exists for every nonzero element
    since ``p`` is prime. Two instances with the same modulus are
    the same ring.
    """

    def __init__(self, modulus):
        if (modulus < 2) or any(modulus % d == 0 for d in range(2, isqrt(modulus) + 1)):
            raise ValueError("Modulus of a prime field must be a prime, not %r." % modulus)
        self.modulus = modulus
        CoefficientRing.__init__(self, 0, 1 % modulus, (int,), "GF(%d)" % modulus)

    def __eq__(self, other):
        if isinstance(other, PrimeField):
            return self.modulus == other.modulus
        return NotImplemented

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((PrimeField, self.modulus))

    def coerce(self, value):
        return CoefficientRing.coerce(self, value) % self.modulus

    def add(self, a, b):
        return (a + b) % self.modulus

    def neg(self, a):
        return (- a) % self.modulus

    def mul(self, a, b):
        return (a * b) % self.modulus

    def div(self, a, b):
        if self.iszero(b):
            raise ZeroDivisionError("Division by zero in %s." % self.name)
        # Fermat's little theorem gives the inverse of b
        return (a * pow(b, self.modulus - 2, self.modulus)) % self.modulus

    def eq(self, a, b):
        return (a - b) % self.modulus == 0


RATIONALS = RationalField()

FLOATS = CoefficientRing(0.0, 1.0, (int, float), "the floats")


if __name__ == '__main__':
    import doctest
    doctest.testmod()
