#
# Arbitrary-precision floating point numbers in a binary or decimal radix, and the
# contexts that govern arithmetic on them.
#

import sys
import threading
from collections import namedtuple
from enum import IntEnum
from fractions import Fraction
from math import gcd
from struct import Struct

import attr

from .radix import BINARY, DECIMAL, radix_for
from .rounding import (ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_EVEN, ROUND_HALF_UP,
                       ROUND_DOWN, ROUND_UP, ALL_ROUNDINGS, LF_EXACTLY_ZERO,
                       LF_MORE_THAN_HALF, round_up)
from .signals import (Flags, SignalingNaNOperand, InvalidAdd, InvalidMultiply,
                      DivisionUndefined, InvalidDecomposition, InvalidOperation,
                      NotRepresentable, DivisionByZero, Overflow, Underflow, Inexact,
                      Rounded, Clamped)

__all__ = ('Context', 'EXACT', 'Kind', 'Num', 'NumTuple', 'Compare',
           'get_context', 'local_context',
           'DefaultContext', 'ExtendedContext', 'FloatContext',
           'IEEEHalfContext', 'IEEESingleContext', 'IEEEDoubleContext',
           'IEEEQuadContext', 'IEEEExtendedContext',
           'DecimalDefaultContext', 'DecimalExtendedContext',
           'Decimal32Context', 'Decimal64Context', 'Decimal128Context',
           'OP_ADD', 'OP_SUBTRACT', 'OP_MULTIPLY', 'OP_DIVIDE', 'OP_PLUS', 'OP_MINUS',
           'OP_ABS', 'OP_SCALEB', 'OP_NEXT_PLUS', 'OP_NEXT_MINUS', 'OP_ULP',
           'OP_COMPARE', 'OP_CONVERT', 'OP_FROM_TRIPLE', 'OP_FROM_STRING',
           'OP_TO_OTHER_RADIX')


# Operation names
OP_ABS = '__abs__'
OP_ADD = 'add'
OP_SUBTRACT = 'subtract'
OP_MULTIPLY = 'multiply'
OP_DIVIDE = 'divide'
OP_PLUS = 'plus'
OP_MINUS = '__neg__'
OP_SCALEB = 'scaleb'
OP_NEXT_PLUS = 'next_plus'
OP_NEXT_MINUS = 'next_minus'
OP_ULP = 'ulp'
OP_COMPARE = 'compare'
OP_CONVERT = 'convert'
OP_FROM_TRIPLE = 'from_triple'
OP_FROM_STRING = 'from_string'
OP_TO_OTHER_RADIX = 'to_other_radix'

# The precision of a context that never rounds
EXACT = 'EXACT'

# Markers replacing the exponent of special values in as_tuple()
SPECIAL_EXPONENTS = {'inf', 'nan', 'snan'}

pack_double = Struct('<d').pack
unpack_double = Struct('<d').unpack
pack_uint64 = Struct('<Q').pack
unpack_uint64 = Struct('<Q').unpack

_HASH_MODULUS = sys.hash_info.modulus


# Four-way result of the compare() operation.
class Compare(IntEnum):
    LESS_THAN = 0
    EQUAL = 1
    GREATER_THAN = 2
    UNORDERED = 3


class Kind(IntEnum):
    '''The variant of a Num.'''
    FINITE = 0
    INFINITE = 1
    QNAN = 2
    SNAN = 3


NumTuple = namedtuple('NumTuple', 'sign coefficient exponent')


def _validate_precision(instance, attribute, value):
    if value == EXACT:
        return
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f'precision must be an integer or EXACT, not {value!r}')
    if value < 1:
        raise ValueError(f'precision must be positive: {value}')


def _frozen(**kwargs):
    return attr.ib(on_setattr=attr.setters.frozen, **kwargs)


@attr.s(slots=True, kw_only=True, eq=False)
class Context:
    '''The governing parameters of arithmetic: radix, precision, exponent range and rounding,
    and which conditions are trapped or ignored.

    Only the flags attribute, where conditions are recorded, may be changed once a context
    is constructed.  Use derive() to obtain a context with different parameters.
    '''

    # A Radix strategy; an integer base is converted
    radix = _frozen(default=BINARY, converter=radix_for)
    # The maximum number of significant digits, or EXACT for no rounding at all
    precision = _frozen(validator=_validate_precision)
    # The minimum and maximum adjusted exponents of normal numbers.  Optional for EXACT.
    emin = _frozen(default=None)
    emax = _frozen(default=None)
    rounding = _frozen(default=ROUND_HALF_EVEN, validator=attr.validators.in_(ALL_ROUNDINGS))
    # Conditions that raise an exception
    traps = _frozen(default=Flags(0), converter=Flags)
    # Conditions that are neither recorded nor trapped
    ignored_flags = _frozen(default=Flags(0), converter=Flags)
    # If True, exponents are kept at or below etop() by padding the coefficient with zeroes
    clamp = _frozen(default=False, converter=bool)
    # If True, the exponent marker of numerals is upper case
    capitals = _frozen(default=True, converter=bool)
    # Conditions that have occurred
    flags = attr.ib(default=Flags(0), converter=Flags)

    def __attrs_post_init__(self):
        if self.precision == EXACT:
            return
        if not isinstance(self.emin, int) or not isinstance(self.emax, int):
            raise TypeError('emin and emax must be integers')
        if self.emin > self.emax:
            raise ValueError(f'emin {self.emin:,d} exceeds emax {self.emax:,d}')

    def derive(self, **overrides):
        '''Return a new context with the given attributes replaced.  Unless given, its flags
        are clear.'''
        overrides.setdefault('flags', Flags(0))
        return attr.evolve(self, **overrides)

    def copy(self):
        '''Return a copy of the context, including its flags.'''
        return attr.evolve(self)

    def clear_flags(self):
        self.flags = Flags(0)

    def is_exact(self):
        return self.precision == EXACT

    def _require_precision(self):
        if self.precision == EXACT:
            raise ValueError('an exact context has no precision')
        return self.precision

    def etiny(self):
        '''The exponent of the smallest subnormal number.'''
        return self.emin - self._require_precision() + 1

    def etop(self):
        '''The exponent of the largest finite number.'''
        return self.emax - self._require_precision() + 1

    def _nan(self):
        return Num(self.radix, Kind.QNAN, 1, 0, 0)

    def _normalized(self, sign, coefficient, exponent):
        '''Return a finite Num.  If the radix asks for it, the coefficient is scaled to the
        full precision of the context.'''
        if self.radix.normalizes_specials and self.precision != EXACT:
            shift = self.precision - self.radix.number_of_digits(coefficient)
            if shift > 0:
                coefficient = self.radix.int_mul_power(coefficient, shift)
                exponent -= shift
        return Num(self.radix, Kind.FINITE, sign, coefficient, exponent)

    #
    # Distinguished values
    #

    def epsilon(self, sign=1):
        '''The difference between 1 and the next larger representable number.'''
        return self._normalized(sign, 1, 1 - self._require_precision())

    def half_epsilon(self, sign=1):
        '''Half of epsilon().'''
        return self._normalized(sign, self.radix.base // 2, -self._require_precision())

    def strict_epsilon(self, sign=1):
        '''The smallest value that, added to 1 under this context's rounding, gives a result
        other than 1.'''
        precision = self._require_precision()
        base = self.radix.base
        if self.rounding in (ROUND_DOWN, ROUND_FLOOR):
            return self.epsilon(sign)
        if self.rounding in (ROUND_UP, ROUND_CEILING):
            return self.minimum_nonzero(sign)
        if self.rounding == ROUND_HALF_UP:
            return self.half_epsilon(sign)
        # Ties do not round up, so the tie must be exceeded
        coefficient = self.radix.int_mul_power(base // 2, precision - 1) + 1
        return self._normalized(sign, coefficient, 1 - 2 * precision)

    def minimum_nonzero(self, sign=1):
        '''The smallest subnormal number.'''
        return Num(self.radix, Kind.FINITE, sign, 1, self.etiny())

    def minimum_normal(self, sign=1):
        '''The smallest normal number.'''
        return self._normalized(sign, 1, self.emin)

    def maximum_finite(self, sign=1):
        '''The finite number of greatest magnitude.'''
        precision = self._require_precision()
        coefficient = self.radix.int_power(precision) - 1
        return Num(self.radix, Kind.FINITE, sign, coefficient, self.etop())

    #
    # Rounding
    #

    def _fix(self, sign, coefficient, exponent, op_tuple):
        '''Return the value sign * coefficient * radix^exponent correctly rounded to this
        context, signalling the conditions that arise.'''
        radix = self.radix
        if self.precision == EXACT:
            return Num(radix, Kind.FINITE, sign, coefficient, exponent)

        precision = self.precision
        etiny = self.etiny()
        etop = self.etop()

        if coefficient == 0:
            exp_max = etop if self.clamp else self.emax
            new_exponent = min(max(exponent, etiny), exp_max)
            result = Num(radix, Kind.FINITE, sign, 0, new_exponent)
            if new_exponent != exponent:
                result = Clamped(op_tuple, result).signal(self)
            return result

        # The exponent of the last digit if the coefficient is full precision
        exp_min = radix.number_of_digits(coefficient) + exponent - precision
        if exp_min > etop:
            return Overflow(op_tuple, self._overflow_value(sign)).signal(self)
        is_subnormal = exp_min < etiny
        if is_subnormal:
            exp_min = etiny

        if exponent < exp_min:
            coefficient, lost_fraction = radix.lost_digits(coefficient, exp_min - exponent)
            if round_up(self.rounding, lost_fraction, sign, coefficient % 2 == 1):
                coefficient += 1
                # A carry out of the top digit
                if radix.number_of_digits(coefficient) > precision:
                    coefficient = radix.int_div_power(coefficient, 1)
                    exp_min += 1
            if exp_min > etop:
                return Overflow(op_tuple, self._overflow_value(sign)).signal(self)

            result = Num(radix, Kind.FINITE, sign, coefficient, exp_min)
            if lost_fraction == LF_EXACTLY_ZERO:
                result = Rounded(op_tuple, result).signal(self)
            elif is_subnormal:
                result = Underflow(op_tuple, result).signal(self)
            else:
                result = Inexact(op_tuple, result).signal(self)
            if coefficient == 0:
                result = Clamped(op_tuple, result).signal(self)
            return result

        # Fold down by padding the coefficient with zeroes
        if self.clamp and exponent > etop:
            coefficient = radix.int_mul_power(coefficient, exponent - etop)
            result = Num(radix, Kind.FINITE, sign, coefficient, etop)
            return Clamped(op_tuple, result).signal(self)

        return Num(radix, Kind.FINITE, sign, coefficient, exponent)

    def _overflow_value(self, sign):
        if round_up(self.rounding, LF_MORE_THAN_HALF, sign, False):
            return Num(self.radix, Kind.INFINITE, sign, 0, 0)
        return self.maximum_finite(sign)

    def _from_ratio(self, sign, numerator, denominator, op_tuple, exponent=0,
                    ideal_exponent=None):
        '''Return sign * numerator / denominator * radix^exponent correctly rounded to this
        context.

        An exact result has trailing zeroes removed down to ideal_exponent, if given.
        Under an EXACT context a ratio with no finite expansion in the radix signals
        NotRepresentable.
        '''
        radix = self.radix
        if ideal_exponent is None:
            ideal_exponent = exponent
        if numerator == 0:
            return self._fix(sign, 0, ideal_exponent, op_tuple)

        if self.precision == EXACT:
            g = gcd(numerator, denominator)
            numerator, denominator = numerator // g, denominator // g
            k = radix.exact_power(denominator)
            if k is None:
                return NotRepresentable(op_tuple, self._nan()).signal(self)
            coefficient = numerator * (radix.int_power(k) // denominator)
            coefficient, exponent = radix.strip_zeros(coefficient, exponent - k,
                                                      ideal_exponent)
            return Num(radix, Kind.FINITE, sign, coefficient, exponent)

        # Choose a scale that gives a quotient of at least precision + 1 digits
        shift = (radix.number_of_digits(numerator) - radix.number_of_digits(denominator)
                 - self.precision - 1)
        if shift < 0:
            numerator = radix.int_mul_power(numerator, -shift)
        else:
            denominator = radix.int_mul_power(denominator, shift)
        quotient, remainder = divmod(numerator, denominator)
        exponent += shift

        if remainder == 0:
            quotient, exponent = radix.strip_zeros(quotient, exponent, ideal_exponent)
        else:
            # Append a sticky digit so rounding sees the discarded part is not zero
            quotient = radix.int_mul_power(quotient, 1) + 1
            exponent -= 1
        return self._fix(sign, quotient, exponent, op_tuple)


#
# Presets
#

DEFAULT_TRAPS = Flags.DIVISION_BY_ZERO | Flags.OVERFLOW | Flags.INVALID_OPERATION
ALL_FLAGS = (Flags.CLAMPED | Flags.DIVISION_BY_ZERO | Flags.INEXACT | Flags.INVALID_OPERATION
             | Flags.OVERFLOW | Flags.ROUNDED | Flags.UNDERFLOW)

DefaultContext = Context(radix=BINARY, precision=53, emin=-1025, emax=1023,
                         rounding=ROUND_HALF_EVEN, traps=DEFAULT_TRAPS, capitals=True,
                         clamp=True)
ExtendedContext = DefaultContext.derive(traps=Flags(0), clamp=False)

# binary16 carries 10 stored bits and the hidden bit
IEEEHalfContext = DefaultContext.derive(precision=11, emin=-14, emax=15)
IEEESingleContext = DefaultContext.derive(precision=24, emin=-126, emax=127)
IEEEDoubleContext = DefaultContext.derive(precision=53, emin=-1022, emax=1023)
IEEEQuadContext = DefaultContext.derive(precision=113, emin=-16382, emax=16383)
IEEEExtendedContext = DefaultContext.derive(precision=64, emin=-16382, emax=16383)

# The host's native float
FloatContext = DefaultContext.derive(precision=sys.float_info.mant_dig,
                                     emin=sys.float_info.min_exp - 1,
                                     emax=sys.float_info.max_exp - 1)

DecimalDefaultContext = Context(radix=DECIMAL, precision=28, emin=-999999999,
                                emax=999999999, rounding=ROUND_HALF_EVEN,
                                traps=DEFAULT_TRAPS, capitals=True, clamp=False)
DecimalExtendedContext = DecimalDefaultContext.derive(precision=9, traps=Flags(0))
Decimal32Context = DecimalDefaultContext.derive(precision=7, emin=-95, emax=96, clamp=True)
Decimal64Context = DecimalDefaultContext.derive(precision=16, emin=-383, emax=384,
                                                clamp=True)
Decimal128Context = DecimalDefaultContext.derive(precision=34, emin=-6143, emax=6144,
                                                 clamp=True)

_defaults = {BINARY.base: DefaultContext, DECIMAL.base: DecimalDefaultContext}


#
# The ambient context.  Each thread has its own stack of contexts pushed by
# local_context(), and its own copy of each radix's default.
#

tls = threading.local()


def _context_stack():
    try:
        return tls.stack
    except AttributeError:
        tls.stack = []
        return tls.stack


def get_context(radix=None):
    '''Return the innermost context pushed by local_context() in this thread, restricted to
    those of the given radix if one is given.  If there is none, return the thread's copy of
    the radix's default context; the binary one if no radix is given.'''
    stack = _context_stack()
    if radix is None:
        if stack:
            return stack[-1]
        radix = BINARY
    else:
        radix = radix_for(radix)
        for context in reversed(stack):
            if context.radix.base == radix.base:
                return context

    try:
        defaults = tls.defaults
    except AttributeError:
        defaults = tls.defaults = {}
    context = defaults.get(radix.base)
    if context is None:
        context = defaults[radix.base] = _defaults[radix.base].copy()
    return context


class LocalContext:
    '''A context manager that pushes a copy of context as the current context of the active
    thread on entry to the with-statement and pops it on exit.  If no context is specified a
    copy of the current context is taken instead.
    '''

    def __init__(self, context=None):
        self.context_to_push = context
        self.pushed = None

    def __enter__(self):
        self.pushed = (self.context_to_push or get_context()).copy()
        _context_stack().append(self.pushed)
        return self.pushed

    def __exit__(self, etype, value, traceback):
        stack = _context_stack()
        if not stack or stack[-1] is not self.pushed:
            raise RuntimeError('local contexts exited out of order')
        stack.pop()


local_context = LocalContext


#
# Numbers
#

def _radix_or_ambient(radix):
    return get_context().radix if radix is None else radix_for(radix)


class Num(namedtuple('Num', 'radix kind sign coefficient exponent')):
    '''An immutable floating point number.

    For finite numbers the value is sign * coefficient * radix^exponent, where sign is +1 or
    -1.  The coefficient is not normalized: 1.0 and 1.00 are different representations of
    the same value.  Zeroes carry an exponent too.

    Infinities have a coefficient and exponent of zero.  The coefficient of a NaN is its
    payload, and its exponent is zero.
    '''

    def __new__(cls, radix, kind, sign, coefficient, exponent):
        radix = radix_for(radix)
        kind = Kind(kind)
        if isinstance(sign, bool) or sign not in (1, -1):
            raise ValueError(f'sign must be 1 or -1, not {sign!r}')
        if not isinstance(coefficient, int):
            raise TypeError('coefficient must be an integer')
        if not isinstance(exponent, int):
            raise TypeError('exponent must be an integer')
        if coefficient < 0:
            raise ValueError(f'coefficient {coefficient:,d} is negative')
        if kind != Kind.FINITE:
            if exponent:
                raise ValueError('the exponent of a non-finite number must be zero')
            if kind == Kind.INFINITE and coefficient:
                raise ValueError('an infinity has no payload')
        return super().__new__(cls, radix, kind, sign, coefficient, exponent)

    #
    # Constructors.  These are exact.
    #

    @classmethod
    def zero(cls, sign=1, radix=None, exponent=0):
        return cls(_radix_or_ambient(radix), Kind.FINITE, sign, 0, exponent)

    @classmethod
    def infinity(cls, sign=1, radix=None):
        return cls(_radix_or_ambient(radix), Kind.INFINITE, sign, 0, 0)

    @classmethod
    def nan(cls, payload=0, sign=1, radix=None):
        return cls(_radix_or_ambient(radix), Kind.QNAN, sign, payload, 0)

    @classmethod
    def snan(cls, payload=0, sign=1, radix=None):
        return cls(_radix_or_ambient(radix), Kind.SNAN, sign, payload, 0)

    @classmethod
    def from_int(cls, value, radix=None):
        '''Return the integer value exactly.'''
        if not isinstance(value, int):
            raise TypeError(f'cannot convert {type(value).__name__} to an integer Num')
        return cls(_radix_or_ambient(radix), Kind.FINITE, -1 if value < 0 else 1,
                   abs(value), 0)

    @classmethod
    def from_triple(cls, sign, coefficient, exponent, radix=None, context=None):
        '''Return the value sign * coefficient * radix^exponent exactly.  The exponent may be
        'inf', 'nan' or 'snan' for special values, when the coefficient is a NaN payload.

        A triple that does not describe a number signals InvalidDecomposition.'''
        radix = _radix_or_ambient(radix)
        op_tuple = (OP_FROM_TRIPLE, sign, coefficient, exponent)
        valid = (not isinstance(sign, bool) and sign in (1, -1)
                 and isinstance(coefficient, int) and coefficient >= 0
                 and not isinstance(exponent, bool))
        if valid:
            if exponent == 'inf':
                if coefficient == 0:
                    return cls(radix, Kind.INFINITE, sign, 0, 0)
            elif exponent == 'nan':
                return cls(radix, Kind.QNAN, sign, coefficient, 0)
            elif exponent == 'snan':
                return cls(radix, Kind.SNAN, sign, coefficient, 0)
            elif isinstance(exponent, int):
                return cls(radix, Kind.FINITE, sign, coefficient, exponent)
        context = context or get_context(radix)
        return InvalidDecomposition(op_tuple, context._nan()).signal(context)

    @classmethod
    def from_float(cls, value, radix=None):
        '''Return the native float value exactly, decomposing its bit pattern.'''
        if not isinstance(value, float):
            raise TypeError(f'cannot convert {type(value).__name__} to a float Num')
        radix = _radix_or_ambient(radix)
        bits, = unpack_uint64(pack_double(value))
        sign = -1 if bits >> 63 else 1
        e_field = (bits >> 52) & 0x7ff
        fraction = bits & ((1 << 52) - 1)

        if e_field == 0x7ff:
            if fraction == 0:
                return cls(radix, Kind.INFINITE, sign, 0, 0)
            kind = Kind.QNAN if fraction & (1 << 51) else Kind.SNAN
            return cls(radix, kind, sign, fraction & ((1 << 51) - 1), 0)

        if e_field:
            coefficient, exponent = fraction | (1 << 52), e_field - 1075
        elif fraction:
            coefficient, exponent = fraction, -1074
        else:
            coefficient, exponent = 0, 0

        if radix.base != 2:
            coefficient, exponent = _binary_to_decimal(coefficient, exponent)
        return cls(radix, Kind.FINITE, sign, coefficient, exponent)

    #
    # Non-computational operations.  These are never exceptional.
    #

    def is_finite(self):
        return self.kind == Kind.FINITE

    def is_infinite(self):
        return self.kind == Kind.INFINITE

    def is_nan(self):
        return self.kind in (Kind.QNAN, Kind.SNAN)

    def is_qnan(self):
        return self.kind == Kind.QNAN

    def is_snan(self):
        return self.kind == Kind.SNAN

    def is_special(self):
        return self.kind != Kind.FINITE

    def is_zero(self):
        return self.kind == Kind.FINITE and self.coefficient == 0

    def is_negative(self):
        return self.sign < 0

    def is_normal(self, context=None):
        '''Return True if finite, non-zero and not subnormal in the context.'''
        if self.kind != Kind.FINITE or self.coefficient == 0:
            return False
        context = context or get_context(self.radix)
        return self.adjusted() >= context.emin

    def is_subnormal(self, context=None):
        if self.kind != Kind.FINITE or self.coefficient == 0:
            return False
        context = context or get_context(self.radix)
        return self.adjusted() < context.emin

    def number_of_digits(self):
        '''The number of digits of the coefficient in the number's radix; 0 for zeroes and
        special values.'''
        if self.kind != Kind.FINITE:
            return 0
        return self.radix.number_of_digits(self.coefficient)

    def adjusted(self):
        '''The exponent of the leading digit.  The exponent for zeroes, 0 for special values.'''
        if self.kind != Kind.FINITE:
            return 0
        if self.coefficient == 0:
            return self.exponent
        return self.exponent + self.radix.number_of_digits(self.coefficient) - 1

    def as_tuple(self):
        '''Return a (sign, coefficient, exponent) triple.  Special values have an exponent of
        'inf', 'nan' or 'snan'.'''
        exponent = self.exponent
        if self.kind == Kind.INFINITE:
            exponent = 'inf'
        elif self.kind == Kind.QNAN:
            exponent = 'nan'
        elif self.kind == Kind.SNAN:
            exponent = 'snan'
        return NumTuple(self.sign, self.coefficient, exponent)

    def as_integer_ratio(self):
        '''Return a pair (n, d) of integers with d positive whose ratio is the value, in
        lowest terms.'''
        if self.kind == Kind.INFINITE:
            raise OverflowError('cannot convert an infinity to an integer ratio')
        if self.kind != Kind.FINITE:
            raise ValueError('cannot convert a NaN to an integer ratio')
        if self.exponent >= 0:
            numerator = self.radix.int_mul_power(self.coefficient, self.exponent)
            denominator = 1
        else:
            numerator = self.coefficient
            denominator = self.radix.int_power(-self.exponent)
            g = gcd(numerator, denominator)
            numerator, denominator = numerator // g, denominator // g
        return self.sign * numerator, denominator

    def nan_payload(self):
        if not self.is_nan():
            raise RuntimeError('nan_payload called on non-NaN')
        return self.coefficient

    def copy_abs(self):
        return self._replace(sign=1)

    def copy_negate(self):
        return self._replace(sign=-self.sign)

    def copy_sign(self, y):
        return self._replace(sign=y.sign)

    def reduce(self):
        '''Return the same value with trailing zero digits of the coefficient removed.'''
        if self.kind != Kind.FINITE:
            return self
        if self.coefficient == 0:
            return self._replace(exponent=0)
        coefficient, exponent = self.radix.strip_zeros(self.coefficient, self.exponent)
        return self._replace(coefficient=coefficient, exponent=exponent)

    #
    # Computational operations
    #

    def _context(self, context):
        context = context or get_context(self.radix)
        if context.radix.base != self.radix.base:
            raise TypeError(f'a {context.radix.name} context cannot govern a '
                            f'{self.radix.name} number')
        return context

    def _convert_other(self, other, context):
        '''Return other as a Num of our radix, or None if it is of an unsupported type.
        Fractions are rounded to the context.'''
        if isinstance(other, Num):
            if other.radix.base != self.radix.base:
                raise TypeError(f'cannot mix {self.radix.name} and {other.radix.name} '
                                'numbers')
            return other
        if isinstance(other, int):
            return Num.from_int(other, self.radix)
        if isinstance(other, float):
            return Num.from_float(other, self.radix)
        if isinstance(other, Fraction):
            sign = -1 if other < 0 else 1
            return context._from_ratio(sign, abs(other.numerator), other.denominator,
                                       (OP_CONVERT, other))
        return None

    def _operand(self, other, context):
        result = self._convert_other(other, context)
        if result is None:
            raise TypeError(f'unsupported operand type: {type(other).__name__}')
        return result

    def _propagate_nan(self, op_tuple, context):
        '''Return the result of an operation with at least one NaN operand: a quiet NaN with
        the payload of the first signaling NaN if there is one, otherwise of the first
        NaN.  A signaling NaN signals SignalingNaNOperand.'''
        nans = [item for item in op_tuple if isinstance(item, Num) and item.is_nan()]
        snans = [nan for nan in nans if nan.is_snan()]
        nan = (snans or nans)[0]
        result = nan._replace(kind=Kind.QNAN)
        if snans:
            result = SignalingNaNOperand(op_tuple, result).signal(context)
        return result

    def add(self, rhs, context=None):
        '''Return the sum self + rhs rounded to the context.'''
        return self._add_sub(rhs, False, context)

    def subtract(self, rhs, context=None):
        '''Return the difference self - rhs rounded to the context.'''
        return self._add_sub(rhs, True, context)

    def _add_sub(self, rhs, is_subtract, context):
        context = self._context(context)
        rhs = self._operand(rhs, context)
        op_tuple = (OP_SUBTRACT if is_subtract else OP_ADD, self, rhs)
        radix = self.radix
        rhs_sign = -rhs.sign if is_subtract else rhs.sign

        if self.kind != Kind.FINITE or rhs.kind != Kind.FINITE:
            if self.is_nan() or rhs.is_nan():
                return self._propagate_nan(op_tuple, context)
            if self.is_infinite():
                if rhs.is_infinite() and rhs_sign != self.sign:
                    return InvalidAdd(op_tuple, context._nan()).signal(context)
                return Num(radix, Kind.INFINITE, self.sign, 0, 0)
            return Num(radix, Kind.INFINITE, rhs_sign, 0, 0)

        lhs_part = (self.coefficient, self.exponent)
        rhs_part = (rhs.coefficient, rhs.exponent)
        if context.precision != EXACT:
            lhs_part, rhs_part = _shrink_distant(lhs_part, rhs_part, radix,
                                                 context.precision)

        # Shift the coefficient with the greater exponent left until its exponent is equal
        # to the smaller exponent.  Then add them as signed integers.
        exponent = min(lhs_part[1], rhs_part[1])
        total = (self.sign * radix.int_mul_power(lhs_part[0], lhs_part[1] - exponent)
                 + rhs_sign * radix.int_mul_power(rhs_part[0], rhs_part[1] - exponent))

        if total:
            sign = 1 if total > 0 else -1
        elif self.sign == rhs_sign:
            # Adding like-signed zeroes preserves their sign
            sign = self.sign
        else:
            # An exact zero sum is positive unless rounding towards minus infinity
            sign = -1 if context.rounding == ROUND_FLOOR else 1
        return context._fix(sign, abs(total), exponent, op_tuple)

    def multiply(self, rhs, context=None):
        '''Return the product self * rhs rounded to the context.'''
        context = self._context(context)
        rhs = self._operand(rhs, context)
        op_tuple = (OP_MULTIPLY, self, rhs)
        sign = self.sign * rhs.sign

        if self.kind != Kind.FINITE or rhs.kind != Kind.FINITE:
            if self.is_nan() or rhs.is_nan():
                return self._propagate_nan(op_tuple, context)
            # infinity * zero -> invalid op
            if self.is_zero() or rhs.is_zero():
                return InvalidMultiply(op_tuple, context._nan()).signal(context)
            return Num(self.radix, Kind.INFINITE, sign, 0, 0)

        return context._fix(sign, self.coefficient * rhs.coefficient,
                            self.exponent + rhs.exponent, op_tuple)

    def divide(self, rhs, context=None):
        '''Return the quotient self / rhs rounded to the context.'''
        context = self._context(context)
        rhs = self._operand(rhs, context)
        op_tuple = (OP_DIVIDE, self, rhs)
        sign = self.sign * rhs.sign

        if self.kind != Kind.FINITE or rhs.kind != Kind.FINITE:
            if self.is_nan() or rhs.is_nan():
                return self._propagate_nan(op_tuple, context)
            if self.is_infinite():
                # infinity / infinity is an invalid op
                if rhs.is_infinite():
                    return DivisionUndefined(op_tuple, context._nan()).signal(context)
                return Num(self.radix, Kind.INFINITE, sign, 0, 0)
            # finite / infinity -> zero
            if context.precision == EXACT:
                return Num(self.radix, Kind.FINITE, sign, 0, 0)
            result = Num(self.radix, Kind.FINITE, sign, 0, context.etiny())
            return Clamped(op_tuple, result).signal(context)

        ideal_exponent = self.exponent - rhs.exponent
        if rhs.coefficient == 0:
            # 0 / 0 -> NaN
            if self.coefficient == 0:
                return DivisionUndefined(op_tuple, context._nan()).signal(context)
            # Finite / 0 -> Infinity
            infinity = Num(self.radix, Kind.INFINITE, sign, 0, 0)
            return DivisionByZero(op_tuple, infinity).signal(context)

        return context._from_ratio(sign, self.coefficient, rhs.coefficient, op_tuple,
                                   ideal_exponent)

    def plus(self, context=None):
        '''Return the value rounded to the context.'''
        context = self._context(context)
        op_tuple = (OP_PLUS, self)
        if self.is_nan():
            return self._propagate_nan(op_tuple, context)
        if self.is_infinite():
            return self
        return context._fix(self.sign, self.coefficient, self.exponent, op_tuple)

    def normalize(self, context=None):
        '''Round to the context and, if finite and non-zero, scale the coefficient to the full
        precision while the exponent permits.  The value is unchanged.'''
        context = self._context(context)
        result = self.plus(context)
        if (result.kind != Kind.FINITE or result.coefficient == 0
                or context.precision == EXACT):
            return result
        shift = min(context.precision - result.number_of_digits(),
                    result.exponent - context.etiny())
        if shift <= 0:
            return result
        coefficient = self.radix.int_mul_power(result.coefficient, shift)
        return result._replace(coefficient=coefficient, exponent=result.exponent - shift)

    def scaleb(self, n, context=None):
        '''Return self * radix^n rounded to the context.'''
        context = self._context(context)
        if not isinstance(n, int):
            raise TypeError('scaleb requires an integer')
        op_tuple = (OP_SCALEB, self, n)
        if self.is_nan():
            return self._propagate_nan(op_tuple, context)
        if self.is_infinite():
            return self
        return context._fix(self.sign, self.coefficient, self.exponent + n, op_tuple)

    def next_plus(self, context=None):
        '''Return the smallest representable number greater than self.'''
        return self._next(context, ROUND_CEILING, OP_NEXT_PLUS)

    def next_minus(self, context=None):
        '''Return the largest representable number less than self.'''
        return self._next(context, ROUND_FLOOR, OP_NEXT_MINUS)

    def _next(self, context, rounding, operation):
        context = self._context(context)
        direction = 1 if rounding == ROUND_CEILING else -1
        if self.is_nan():
            return self._propagate_nan((operation, self), context)
        if self.is_infinite():
            if self.sign == direction:
                return self
            return context.maximum_finite(self.sign)

        work = context.derive(rounding=rounding, traps=Flags(0), ignored_flags=ALL_FLAGS)
        result = self.plus(work)
        if result != self:
            return result
        # Smaller than any representable difference
        tiny = Num(self.radix, Kind.FINITE, direction, 1, context.etiny() - 1)
        return self.add(tiny, work)

    def ulp(self, context=None, mode='low'):
        '''Return the unit in the last place of a number of this magnitude at the context's
        precision.

        If the magnitude is a power of the radix, mode 'low' gives the gap to the next
        number below it, and mode 'high' the gap to the next number above it.'''
        context = self._context(context)
        if mode not in ('low', 'high'):
            raise ValueError(f'invalid ulp mode: {mode!r}')
        op_tuple = (OP_ULP, self)
        if self.is_nan():
            return self._propagate_nan(op_tuple, context)
        if context.precision == EXACT:
            return InvalidOperation(op_tuple, context._nan()).signal(context)

        if self.is_infinite():
            exponent = context.etop()
        elif self.coefficient == 0 or self.adjusted() <= context.emin:
            exponent = context.etiny()
        else:
            exponent = self.adjusted() - context.precision + 1
            if mode == 'low' and self.radix.is_power(self.coefficient):
                exponent -= 1
        return context._normalized(1, 1, exponent)

    def _compare_quiet(self, rhs):
        '''Return self vs rhs as one of the four comparison constants.  -0 and +0 compare
        equal.'''
        if self.is_nan() or rhs.is_nan():
            return Compare.UNORDERED
        if self.is_infinite():
            if rhs.is_infinite() and rhs.sign == self.sign:
                return Compare.EQUAL
            return Compare.GREATER_THAN if self.sign > 0 else Compare.LESS_THAN
        if rhs.is_infinite():
            return Compare.LESS_THAN if rhs.sign > 0 else Compare.GREATER_THAN

        # Zeroes cannot have their exponents compared
        if self.coefficient == 0 or rhs.coefficient == 0:
            if self.coefficient == rhs.coefficient:
                return Compare.EQUAL
            if self.coefficient == 0:
                return Compare.LESS_THAN if rhs.sign > 0 else Compare.GREATER_THAN
            return Compare.GREATER_THAN if self.sign > 0 else Compare.LESS_THAN
        if self.sign != rhs.sign:
            return Compare.GREATER_THAN if self.sign > 0 else Compare.LESS_THAN

        # Two non-zero finite numbers with equal signs
        difference = self.adjusted() - rhs.adjusted()
        if difference == 0:
            exponent = min(self.exponent, rhs.exponent)
            lhs_c = self.radix.int_mul_power(self.coefficient, self.exponent - exponent)
            rhs_c = self.radix.int_mul_power(rhs.coefficient, rhs.exponent - exponent)
            difference = lhs_c - rhs_c
        if difference == 0:
            return Compare.EQUAL
        if (difference > 0) == (self.sign > 0):
            return Compare.GREATER_THAN
        return Compare.LESS_THAN

    def _compare_any(self, other):
        '''Compare with a Num, int, float or Fraction.  Return None for other types.'''
        if isinstance(other, Num) and other.radix.base != self.radix.base:
            # Numbers of another radix compare by value
            if other.is_nan():
                return Compare.UNORDERED
            if other.is_infinite():
                other = Num(self.radix, Kind.INFINITE, other.sign, 0, 0)
            else:
                other = Fraction(*other.as_integer_ratio())
        if isinstance(other, Fraction):
            if self.is_finite():
                lhs = Fraction(*self.as_integer_ratio())
                if lhs == other:
                    return Compare.EQUAL
                return Compare.LESS_THAN if lhs < other else Compare.GREATER_THAN
            if self.is_nan():
                return Compare.UNORDERED
            return Compare.GREATER_THAN if self.sign > 0 else Compare.LESS_THAN
        if isinstance(other, (Num, int, float)):
            return self._compare_quiet(self._convert_other(other, None))
        return None

    def compare(self, rhs, context=None):
        '''Return self vs rhs as one of the four comparison constants.  A signaling NaN
        signals SignalingNaNOperand.'''
        context = self._context(context)
        rhs = self._operand(rhs, context)
        result = self._compare_quiet(rhs)
        if result == Compare.UNORDERED and (self.is_snan() or rhs.is_snan()):
            result = SignalingNaNOperand((OP_COMPARE, self, rhs), result).signal(context)
        return result

    #
    # Conversions
    #

    def to_string(self, context=None, base=None, eng=False, any_rounding=False,
                  all_digits=False):
        '''Return the value as a numeral in the given base, by default decimal.
        See radixnum.text.format_num.'''
        from .text import format_num
        return format_num(self, context, base=base, eng=eng, any_rounding=any_rounding,
                          all_digits=all_digits)

    def to_float(self):
        '''Return the nearest native float.'''
        if self.kind == Kind.INFINITE:
            return float('-inf') if self.sign < 0 else float('inf')
        if self.is_nan():
            return float('-nan') if self.sign < 0 else float('nan')

        if not self.radix.native:
            # Python's float() rounds numerals correctly
            return float(f'{"-" if self.sign < 0 else ""}{self.coefficient}e{self.exponent}')

        # Round to double precision, then compose the bit pattern
        context = IEEEDoubleContext.derive(traps=Flags(0), rounding=ROUND_HALF_EVEN)
        value = self.plus(context)
        sign_bit = 1 << 63 if value.sign < 0 else 0
        if value.is_infinite():
            bits = sign_bit | (0x7ff << 52)
        elif value.coefficient == 0:
            bits = sign_bit
        else:
            coefficient, exponent = value.coefficient, value.exponent
            # Shift the integer bit into place unless that would go below etiny
            shift = min(53 - coefficient.bit_length(), exponent + 1074)
            coefficient <<= shift
            exponent -= shift
            if coefficient >> 52:
                bits = sign_bit | ((exponent + 1075) << 52) | (coefficient - (1 << 52))
            else:
                bits = sign_bit | coefficient
        result, = unpack_double(pack_uint64(bits))
        return result

    #
    # Python operators
    #

    def __repr__(self):
        return f'Num({self.radix.base}, {tuple(self.as_tuple())!r})'

    def __str__(self):
        return self.to_string(base=10)

    def __abs__(self):
        '''Return the absolute value.  A signaling NaN signals.'''
        if self.is_snan():
            return self._propagate_nan((OP_ABS, self), self._context(None))
        return self.copy_abs()

    def __neg__(self):
        '''Return the negated value.  A signaling NaN signals.'''
        if self.is_snan():
            return self._propagate_nan((OP_MINUS, self), self._context(None))
        return self.copy_negate()

    def __pos__(self):
        '''Return this value.  A signaling NaN signals.'''
        if self.is_snan():
            return self._propagate_nan((OP_PLUS, self), self._context(None))
        return self

    def __eq__(self, other):
        compare = self._compare_any(other)
        if compare is None:
            return NotImplemented
        return compare == Compare.EQUAL

    def __ne__(self, other):
        compare = self._compare_any(other)
        if compare is None:
            return NotImplemented
        return compare != Compare.EQUAL

    def __lt__(self, other):
        compare = self._compare_any(other)
        if compare is None:
            return NotImplemented
        return compare == Compare.LESS_THAN

    def __le__(self, other):
        compare = self._compare_any(other)
        if compare is None:
            return NotImplemented
        return compare in (Compare.EQUAL, Compare.LESS_THAN)

    def __ge__(self, other):
        compare = self._compare_any(other)
        if compare is None:
            return NotImplemented
        return compare in (Compare.EQUAL, Compare.GREATER_THAN)

    def __gt__(self, other):
        compare = self._compare_any(other)
        if compare is None:
            return NotImplemented
        return compare == Compare.GREATER_THAN

    def __bool__(self):
        return not self.is_zero()

    def __int__(self):
        '''Truncate towards zero.'''
        if self.kind == Kind.INFINITE:
            raise OverflowError('cannot convert an infinity to an integer')
        if self.kind != Kind.FINITE:
            raise ValueError('cannot convert a NaN to an integer')
        return self.sign * self.radix.int_mul_power(self.coefficient, self.exponent)

    __trunc__ = __int__

    def __float__(self):
        return self.to_float()

    def _arith_operand(self, other):
        if isinstance(other, (Num, int, float, Fraction)):
            return other
        return None

    def __add__(self, other):
        if self._arith_operand(other) is None:
            return NotImplemented
        return self.add(other)

    def __radd__(self, other):
        if self._arith_operand(other) is None:
            return NotImplemented
        return self.add(other)

    def __sub__(self, other):
        if self._arith_operand(other) is None:
            return NotImplemented
        return self.subtract(other)

    def __rsub__(self, other):
        if self._arith_operand(other) is None:
            return NotImplemented
        context = self._context(None)
        return self._operand(other, context).subtract(self, context)

    def __mul__(self, other):
        if self._arith_operand(other) is None:
            return NotImplemented
        return self.multiply(other)

    def __rmul__(self, other):
        if self._arith_operand(other) is None:
            return NotImplemented
        return self.multiply(other)

    def __truediv__(self, other):
        if self._arith_operand(other) is None:
            return NotImplemented
        return self.divide(other)

    def __rtruediv__(self, other):
        if self._arith_operand(other) is None:
            return NotImplemented
        context = self._context(None)
        return self._operand(other, context).divide(self, context)

    def __hash__(self):
        '''Python hash.  Must hash equally to other types with the same value.'''
        if self.kind == Kind.INFINITE:
            return hash(float('-inf')) if self.sign < 0 else hash(float('inf'))
        if self.kind == Kind.SNAN:
            raise TypeError('cannot hash a signaling NaN')
        if self.kind == Kind.QNAN:
            return object.__hash__(self)

        # As for Decimal: modular arithmetic avoids computing huge powers
        base = self.radix.base
        if self.exponent >= 0:
            exp_hash = pow(base, self.exponent, _HASH_MODULUS)
        else:
            exp_hash = pow(pow(base, _HASH_MODULUS - 2, _HASH_MODULUS), -self.exponent,
                           _HASH_MODULUS)
        result = self.coefficient * exp_hash % _HASH_MODULUS
        if self.sign < 0:
            result = -result
        return -2 if result == -1 else result


def _binary_to_decimal(coefficient, exponent):
    '''Return the decimal (coefficient, exponent) pair of coefficient * 2^exponent.'''
    if coefficient == 0 or exponent >= 0:
        return coefficient << max(exponent, 0), 0
    # Remove factors of two first to keep the decimal coefficient small
    shift = min((coefficient & -coefficient).bit_length() - 1, -exponent)
    coefficient >>= shift
    n = -exponent - shift
    return coefficient * 5 ** n, -n


def _shrink_distant(lhs_part, rhs_part, radix, precision):
    '''If one addend lies wholly below the rounding position of the other, replace it with a
    sticky value that rounds identically.  This prevents alignment creating huge integers.
    '''
    flipped = lhs_part[1] < rhs_part[1]
    if flipped:
        lhs_part, rhs_part = rhs_part, lhs_part
    # lhs_part now has the larger exponent
    exponent = lhs_part[1] + min(-2, radix.number_of_digits(lhs_part[0]) - precision - 3)
    if (lhs_part[0] and rhs_part[0]
            and radix.number_of_digits(rhs_part[0]) + rhs_part[1] - 1 < exponent):
        rhs_part = (1, exponent)
    if flipped:
        return rhs_part, lhs_part
    return lhs_part, rhs_part
