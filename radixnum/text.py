#
# Numerals: rendering numbers as text in any base from 2 to 36, and reading them back.
#

import re
from functools import lru_cache
from math import log

import attr

from .digits import free_format
from .num import Kind, Num, get_context, OP_FROM_STRING
from .rounding import flip_directed

__all__ = ('TextFormat', 'format_num', 'parse_numeral', 'DIGITS')


DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'


def _check_base(base):
    if not isinstance(base, int) or not 2 <= base <= 36:
        raise ValueError(f'base must be an integer from 2 to 36: {base!r}')


def int_to_digits(value, base):
    '''Return the digits of the non-negative integer value in base.'''
    if base == 10:
        return str(value)
    if base == 2:
        return format(value, 'b')
    if base == 16:
        return format(value, 'x')
    digits = []
    while True:
        value, digit = divmod(value, base)
        digits.append(DIGITS[digit])
        if not value:
            break
    return ''.join(reversed(digits))


@attr.s(slots=True, kw_only=True)
class TextFormat:
    '''Controls the output of numerals.'''

    # If True the exponent marker 'e' is in upper case.  Bases above 10 use '@'.
    capitals = attr.ib(default=True)
    # If True, exponents are shown as multiples of three
    eng = attr.ib(default=False)
    # The string output for infinity
    inf = attr.ib(default='Infinity')
    # The string output for quiet NaNs
    qnan = attr.ib(default='NaN')
    # The string output for signaling NaNs
    snan = attr.ib(default='sNaN')

    def leading_sign(self, sign):
        '''Return the leading sign string.'''
        return '-' if sign < 0 else ''

    def exponent_marker(self, base):
        if base > 10:
            return '@'
        return 'E' if self.capitals else 'e'

    def format_non_finite(self, value):
        '''Returns the output text for infinities and NaNs.  NaN payloads are shown in
        decimal, and only if non-zero.'''
        if value.kind == Kind.INFINITE:
            special = self.inf
        else:
            special = self.snan if value.kind == Kind.SNAN else self.qnan
            if value.coefficient:
                special += str(value.coefficient)
        return self.leading_sign(value.sign) + special

    def format_digits(self, sign, digits, dec_pos, base, is_zero=False):
        '''sign is +1 or -1.  digits is a string of digits, and the point lies dec_pos digits
        after the first of them.

        A number whose last digit is not above the units position, and whose leading digit
        is not too far below it, is written without an exponent.  Others are written in
        scientific notation, or engineering notation if eng is set.
        '''
        exponent = dec_pos - len(digits)
        if exponent <= 0 and dec_pos > -6:
            dot_pos = dec_pos
        elif not self.eng:
            dot_pos = 1
        elif is_zero:
            dot_pos = (dec_pos + 1) % 3 - 1
        else:
            dot_pos = (dec_pos - 1) % 3 + 1

        if dot_pos <= 0:
            int_part = '0'
            frac_part = '.' + '0' * -dot_pos + digits
        elif dot_pos >= len(digits):
            int_part = digits + '0' * (dot_pos - len(digits))
            frac_part = ''
        else:
            int_part = digits[:dot_pos]
            frac_part = '.' + digits[dot_pos:]

        if dec_pos == dot_pos:
            exp_part = ''
        else:
            exp_part = f'{self.exponent_marker(base)}{dec_pos - dot_pos:+d}'

        return self.leading_sign(sign) + int_part + frac_part + exp_part


def format_num(value, context=None, base=None, eng=False, any_rounding=False,
               all_digits=False):
    '''Return the numeral for value in base, by default decimal.

    In the value's own radix the coefficient and exponent are rendered exactly.  In another
    base the shortest numeral is produced that reads back as the value at its own precision
    under the context's rounding, or under every rounding if any_rounding is True.
    all_digits asks for every significant digit instead of the shortest numeral.
    '''
    context = value._context(context)
    if base is None:
        base = 10
    _check_base(base)

    text_format = TextFormat(capitals=context.capitals, eng=eng)
    if value.is_special():
        return text_format.format_non_finite(value)

    if base == value.radix.base:
        digits = int_to_digits(value.coefficient, base)
        return text_format.format_digits(value.sign, digits, value.exponent + len(digits),
                                         base, value.coefficient == 0)

    if value.coefficient == 0:
        return text_format.leading_sign(value.sign) + '0'

    rounding = flip_directed(context.rounding, value.sign)
    min_exponent = None if context.is_exact() else context.etiny()
    dec_pos, digits = free_format(value.coefficient, value.exponent, rounding, min_exponent,
                                  value.number_of_digits(), value.radix.base, base,
                                  all_digits=all_digits, any_rounding=any_rounding)
    digits = ''.join(DIGITS[digit] for digit in digits)
    return text_format.format_digits(value.sign, digits, dec_pos, base)


@lru_cache(maxsize=None)
def numeral_regex(base):
    '''Return the compiled regular expression matching numerals in base.'''
    if base <= 10:
        digit = f'[0-{base - 1}]'
        marker = 'e'
    else:
        digit = f'[0-9a-{DIGITS[base - 1]}]'
        marker = '@'
    return re.compile(
        # sign[opt]
        '([-+])?('
        # (integer[opt].fraction or integer.[opt])
        f'(({digit}*)\\.({digit}+)|({digit}+)\\.?)'
        # marker sign[opt]dec-exponent   [opt]
        f'({marker}([-+]?[0-9]+))?|'
        # inf or infinity
        '(inf(inity)?)|'
        # nan-or-snan dec-payload[opt]
        '((s?)nan([0-9]+)?))$',
        re.ASCII | re.IGNORECASE
    )


def parse_numeral(text, context=None, base=None):
    '''Return the number a numeral in base denotes, correctly rounded to the context.  The
    base defaults to 10.  The exponent of a numeral is a power of its base written in
    decimal.

    Raises SyntaxError if the text is not a numeral.
    '''
    context = context or get_context()
    radix = context.radix
    if base is None:
        base = 10
    _check_base(base)

    match = numeral_regex(base).match(text.strip())
    if match is None:
        raise SyntaxError(f'invalid numeric string: {text!r}')

    sign = -1 if match.group(1) == '-' else 1
    if match.group(9):
        return Num(radix, Kind.INFINITE, sign, 0, 0)
    if match.group(11):
        kind = Kind.SNAN if match.group(12) else Kind.QNAN
        return Num(radix, kind, sign, int(match.group(13) or 0), 0)

    if match.group(6) is not None:
        int_part, frac_part = match.group(6), ''
    else:
        int_part, frac_part = match.group(4), match.group(5)
    coefficient = int(int_part + frac_part, base)
    exponent = int(match.group(8) or 0) - len(frac_part)
    op_tuple = (OP_FROM_STRING, text)

    if base == radix.base:
        return context._fix(sign, coefficient, exponent, op_tuple)

    if coefficient and not context.is_exact():
        # Values far outside the exponent range round like any other such value, which
        # avoids computing enormous powers of the base
        scale = log(base) / log(radix.base)
        length = len(int_to_digits(coefficient, base))
        if (length - 1 + exponent) * scale > context.emax + 2:
            return context._fix(sign, 1, context.emax + 2, op_tuple)
        if (length + exponent) * scale < context.etiny() - 2:
            return context._fix(sign, 1, context.etiny() - 2, op_tuple)

    if exponent >= 0:
        return context._from_ratio(sign, coefficient * base ** exponent, 1, op_tuple)
    return context._from_ratio(sign, coefficient, base ** -exponent, op_tuple)
