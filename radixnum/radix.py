#
# Radix strategies: the integer primitives that make values and contexts radix-generic.
#

from fractions import Fraction
from math import gcd

from .rounding import LF_EXACTLY_ZERO, LF_LESS_THAN_HALF, lost_fraction

__all__ = ('Radix', 'BinaryRadix', 'DecimalRadix', 'BINARY', 'DECIMAL', 'radix_for')


class Radix:
    '''Stateless arithmetic on integer powers of a numeral base.

    Subclasses may override the generic implementations with faster ones, and supply the
    hooks that distinguish one radix from another.
    '''

    # Set by subclasses
    base = None
    name = None
    # If True, epsilons and ulps are returned scaled to the context precision
    normalizes_specials = False
    # If True, values can be composed directly into a native float bit pattern
    native = False

    def radix(self):
        return self.base

    def int_power(self, n):
        '''Return base^n exactly.  An int for n >= 0, otherwise a Fraction.'''
        if n < 0:
            return Fraction(1, self.base ** -n)
        return self.base ** n

    def int_mul_power(self, x, n):
        '''Return x * base^n as an integer, truncating towards minus infinity if n < 0.'''
        if n < 0:
            return x // self.base ** -n
        return x * self.base ** n

    def int_div_power(self, x, n):
        '''Return x / base^n as an integer, truncating towards minus infinity if n > 0.'''
        if n < 0:
            return x * self.base ** -n
        return x // self.base ** n

    def number_of_digits(self, x):
        '''Return the number of base digits of the non-negative integer x; 0 for 0.'''
        if x == 0:
            return 0
        count = 0
        while x:
            x //= self.base
            count += 1
        return count

    def is_power(self, x):
        '''Return True if x is a non-negative integer power of the base.'''
        if x < 1:
            return False
        while x % self.base == 0:
            x //= self.base
        return x == 1

    def lost_digits(self, x, n):
        '''Return x with its n least significant digits discarded, and the fraction that was
        lost doing so.  A negative n shifts left.
        '''
        if n <= 0:
            return self.int_mul_power(x, -n), LF_EXACTLY_ZERO
        # Prevent over-large powers consuming memory
        if n > self.number_of_digits(x) + 1:
            return 0, LF_LESS_THAN_HALF if x else LF_EXACTLY_ZERO
        unit = self.base ** n
        quotient, remainder = divmod(x, unit)
        return quotient, lost_fraction(remainder, unit)

    def exact_power(self, denominator):
        '''Return the smallest k found such that denominator divides base^k, or None if there
        is none, i.e. if 1 / denominator has no finite expansion in this base.'''
        k = 0
        while denominator != 1:
            g = gcd(denominator, self.base)
            if g == 1:
                return None
            denominator //= g
            k += 1
        return k

    def strip_zeros(self, coefficient, exponent, limit=None):
        '''Remove trailing zero digits from coefficient, raising exponent to compensate but not
        beyond limit.'''
        if coefficient == 0:
            return coefficient, exponent
        while coefficient % self.base == 0 and (limit is None or exponent < limit):
            coefficient //= self.base
            exponent += 1
        return coefficient, exponent

    def __repr__(self):
        return f'<{self.__class__.__name__} base={self.base}>'


class BinaryRadix(Radix):
    '''Base 2.  Powers are shifts.'''

    base = 2
    name = 'binary'
    normalizes_specials = True
    native = True

    def int_power(self, n):
        if n < 0:
            return Fraction(1, 1 << -n)
        return 1 << n

    def int_mul_power(self, x, n):
        return x >> -n if n < 0 else x << n

    def int_div_power(self, x, n):
        return x << -n if n < 0 else x >> n

    def number_of_digits(self, x):
        return x.bit_length()

    def is_power(self, x):
        return x > 0 and x & (x - 1) == 0

    def strip_zeros(self, coefficient, exponent, limit=None):
        if coefficient == 0:
            return coefficient, exponent
        shift = (coefficient & -coefficient).bit_length() - 1
        if limit is not None:
            shift = max(0, min(shift, limit - exponent))
        return coefficient >> shift, exponent + shift


class DecimalRadix(Radix):
    '''Base 10.'''

    base = 10
    name = 'decimal'

    def number_of_digits(self, x):
        return len(str(x)) if x else 0


BINARY = BinaryRadix()
DECIMAL = DecimalRadix()

_strategies = {2: BINARY, 10: DECIMAL}


def radix_for(base):
    '''Return the strategy for an integer base, or a Radix passed through unchanged.'''
    if isinstance(base, Radix):
        return base
    try:
        return _strategies[base]
    except (KeyError, TypeError):
        raise ValueError(f'unsupported radix: {base!r}') from None
