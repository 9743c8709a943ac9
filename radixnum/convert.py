#
# Coercion of Python values to numbers, and conversion between radices.
#

from decimal import Decimal
from fractions import Fraction

from .num import (Context, EXACT, Num, get_context, OP_CONVERT, OP_TO_OTHER_RADIX)
from .radix import BINARY, DECIMAL, radix_for
from .text import format_num, parse_numeral

__all__ = ('from_string', 'from_int', 'from_float', 'from_fraction', 'from_rational',
           'from_triple', 'from_value', 'to_other_radix_exact', 'to_other_radix_approx',
           'to_float')


def from_string(text, context=None, base=None):
    '''Return the number the numeral denotes, correctly rounded to the context.  This is the
    only constructor that rounds by default.'''
    return parse_numeral(text, context, base)


def from_int(value, radix=None):
    '''Return the integer exactly.'''
    return Num.from_int(value, radix)


def from_float(value, radix=None):
    '''Return the native float exactly.'''
    return Num.from_float(value, radix)


def from_triple(sign, coefficient, exponent, radix=None, context=None):
    return Num.from_triple(sign, coefficient, exponent, radix, context)


def from_rational(numerator, denominator, context=None):
    '''Return numerator / denominator correctly rounded to the context.  Under an EXACT
    context the ratio must have a finite expansion in the context's radix.'''
    if not isinstance(numerator, int) or not isinstance(denominator, int):
        raise TypeError('numerator and denominator must be integers')
    if denominator == 0:
        raise ZeroDivisionError('zero denominator')
    context = context or get_context()
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    sign = -1 if numerator < 0 else 1
    op_tuple = (OP_CONVERT, Fraction(numerator, denominator))
    return context._from_ratio(sign, abs(numerator), denominator, op_tuple)


def from_fraction(value, context=None):
    '''Return the rational value correctly rounded to the context.'''
    return from_rational(value.numerator, value.denominator, context)


def from_value(value, context=None):
    '''Return a number in the context's radix for a Num, int, float, Fraction, Decimal or
    str.  Integers and floats are converted exactly; the others are rounded to the
    context.'''
    context = context or get_context()
    if isinstance(value, Num):
        if value.radix.base == context.radix.base:
            return value
        if value.is_special():
            return value._replace(radix=context.radix)
        result = from_fraction(Fraction(*value.as_integer_ratio()), context)
        return result.copy_sign(value) if result.is_zero() else result
    if isinstance(value, int):
        return Num.from_int(value, context.radix)
    if isinstance(value, float):
        return Num.from_float(value, context.radix)
    if isinstance(value, Fraction):
        return from_fraction(value, context)
    if isinstance(value, Decimal):
        return parse_numeral(str(value), context, base=10)
    if isinstance(value, str):
        return parse_numeral(value, context)
    raise TypeError(f'cannot convert {type(value).__name__} to a Num')


def _other_radix(value, radix):
    if radix is not None:
        return radix_for(radix)
    return DECIMAL if value.radix.base == BINARY.base else BINARY


def to_other_radix_exact(value, radix=None, context=None):
    '''Return the value exactly in another radix, by default the other of binary and decimal.

    Every binary number has a finite decimal expansion.  A decimal number whose binary
    expansion is infinite signals NotRepresentable on the context.  Inexact and Rounded
    are never signalled.
    '''
    context = value._context(context)
    target = _other_radix(value, radix)
    if value.is_special():
        return value._replace(radix=target)

    numerator, denominator = value.as_integer_ratio()
    exact = Context(radix=target, precision=EXACT, traps=context.traps,
                    ignored_flags=context.ignored_flags)
    op_tuple = (OP_TO_OTHER_RADIX, value, target.base)
    try:
        return exact._from_ratio(value.sign, abs(numerator), denominator, op_tuple)
    finally:
        context.flags |= exact.flags


def to_other_radix_approx(value, radix=None, context=None, any_rounding=False):
    '''Return the number in another radix written with the fewest digits that reads back as
    the value at its own precision under the context's rounding, or under every rounding
    if any_rounding is True.

    The context governs the value's radix.  The result is exact in the target radix.
    '''
    context = value._context(context)
    target = _other_radix(value, radix)
    if value.is_special():
        return value._replace(radix=target)
    text = format_num(value, context, base=target.base, any_rounding=any_rounding)
    result = parse_numeral(text, Context(radix=target, precision=EXACT), target.base)
    # Keep the sign of zeroes, which the numeral "0" loses
    return result.copy_sign(value)


def to_float(value):
    '''Return the nearest native float.  Binary numbers compose the bit pattern directly.'''
    return value.to_float()
