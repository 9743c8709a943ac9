#
# Free-format digit generation.
#
# See "How to Print Floating-Point Numbers Accurately" by Steele and White, and "Printing
# Floating-Point Numbers Quickly and Accurately" by Burger and Dybvig.  The value and the
# bounds of the interval of numerals that read back as the value are kept as exact
# integer ratios, so digit extraction introduces no error of its own.
#

import logging
from math import ceil, gcd, log

from .rounding import (ROUND_CEILING, ROUND_FLOOR, ROUND_DOWN, ROUND_UP,
                       ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_HALF_DOWN)

__all__ = ('float_to_digits', 'adjust', 'free_format', 'has_finite_expansion')

logger = logging.getLogger(__name__)


def has_finite_expansion(coefficient, exponent, input_radix, output_radix):
    '''Return True if coefficient * input_radix^exponent can be written with finitely many
    digits in output_radix.'''
    if exponent >= 0 or coefficient == 0:
        return True
    denominator = input_radix ** -exponent
    denominator //= gcd(coefficient, denominator)
    while denominator != 1:
        g = gcd(denominator, output_radix)
        if g == 1:
            return False
        denominator //= g
    return True


def _interval(rounding, m_low, m_high, is_even):
    '''Return (low, high, low_inclusive, high_inclusive): how far below and above the value a
    numeral may lie and still read back as the value under rounding.  m_low and m_high are
    the full gaps to the neighbouring values and are even.

    Directed roundings act on magnitudes; the caller has already swapped ceiling and floor
    for negative numbers.  A rounding of None asks for the round-to-nearest interval common
    to all three ties rules.
    '''
    if rounding == ROUND_HALF_EVEN:
        return m_low // 2, m_high // 2, is_even, is_even
    if rounding == ROUND_HALF_UP:
        return m_low // 2, m_high // 2, True, False
    if rounding == ROUND_HALF_DOWN:
        return m_low // 2, m_high // 2, False, True
    if rounding in (ROUND_DOWN, ROUND_FLOOR):
        return 0, m_high, True, False
    if rounding in (ROUND_UP, ROUND_CEILING):
        return m_low, 0, False, True
    if rounding is None:
        return m_low // 2, m_high // 2, False, False
    raise ValueError(f'invalid rounding mode: {rounding!r}')


def _estimate_scale(value, s, output_radix):
    '''Estimate the least k with value < s * output_radix^k.  Fixed up by the caller.'''
    try:
        return ceil((log(value) - log(s)) / log(output_radix))
    except (OverflowError, ValueError):
        return 0


def float_to_digits(coefficient, exponent, rounding, min_exponent, precision,
                    input_radix, output_radix, all_digits=False, any_rounding=False):
    '''Generate the shortest digit sequence in output_radix that reads back as the positive
    value coefficient * input_radix^exponent when rounded to precision digits of
    input_radix with the given rounding.

    min_exponent is the smallest exponent representable at that precision, or None if it
    is unbounded.  It matters only on a power-of-the-radix boundary, where the gap below
    the value is normally a radix times smaller than the gap above it.

    If any_rounding is True the digits must read back as the value under every rounding
    mode; with directed roundings that demands the exact expansion.  If that is infinite
    in output_radix, only the round-to-nearest modes are guaranteed.

    If all_digits is True generation does not stop at the shortest sequence but continues
    while the next digit is significant, i.e. while one unit in it is wider than the
    interval of numerals that read back as the value.

    Returns a tuple (dec_pos, round_needed, digits).  digits is a list of digit values,
    the point lies dec_pos digits after the first one, and round_needed indicates the last
    digit must be incremented, which adjust() does.
    '''
    if coefficient <= 0:
        raise ValueError('coefficient must be positive')

    b, B = input_radix, output_radix
    exact = False
    if any_rounding:
        if has_finite_expansion(coefficient, exponent, b, B):
            exact = True
        else:
            logger.debug('%d*%d^%d has no finite expansion in base %d; guaranteeing '
                         'round-to-nearest only', coefficient, b, exponent, B)
        rounding = None

    # On a boundary the value below is closer.  Work one digit finer so both gaps are
    # integers.
    f, e = coefficient, exponent
    if f == b ** (precision - 1) and (min_exponent is None or e > min_exponent):
        r, m_high, m_low = f * b, b, 1
        e -= 1
    else:
        r, m_high, m_low = f, 1, 1

    # The value is r / s.  Doubling makes the half gaps integers too.
    r, m_high, m_low = r * 2, m_high * 2, m_low * 2
    if e >= 0:
        scale = b ** e
        r, m_high, m_low = r * scale, m_high * scale, m_low * scale
        s = 2
    else:
        s = 2 * b ** -e

    if exact:
        low, high, low_inclusive, high_inclusive = 0, 0, True, True
    else:
        low, high, low_inclusive, high_inclusive = _interval(
            rounding, m_low, m_high, coefficient % 2 == 0)

    # Find the least k such that everything in the interval is below B^k.  Then the
    # first digit is that of B^(k-1), and a round-up of the last digit cannot carry
    # beyond it.
    k = _estimate_scale(r + high, s, B)
    if k >= 0:
        s *= B ** k
    else:
        scale = B ** -k
        r, low, high = r * scale, low * scale, high * scale
    while r + high >= s:
        s *= B
        k += 1
    while (r + high) * B < s:
        r, low, high = r * B, low * B, high * B
        k -= 1

    digits = []
    while True:
        digit, r = divmod(r * B, s)
        low *= B
        high *= B
        # Truncating here stays in the interval
        tc_low = r < low or (low_inclusive and r == low)
        # Incrementing the digit stays in the interval
        tc_high = r + high > s or (high_inclusive and r + high == s)
        if tc_low or tc_high:
            if not all_digits or s <= B * (low + high) or (r == 0 and exact):
                break
        digits.append(digit)

    if tc_low and tc_high:
        twice = 2 * r
        round_needed = twice > s or (twice == s and digit % 2 == 1)
    else:
        round_needed = tc_high
    digits.append(digit)

    return k, round_needed, digits


def adjust(dec_pos, round_needed, digits, output_radix):
    '''Apply a deferred round-up to the last digit, propagating any carry, and remove
    leading zeroes.  Returns a (dec_pos, digits) pair.'''
    digits = list(digits)
    if round_needed:
        pos = len(digits) - 1
        while pos >= 0 and digits[pos] == output_radix - 1:
            digits[pos] = 0
            pos -= 1
        if pos < 0:
            digits.insert(0, 1)
            dec_pos += 1
        else:
            digits[pos] += 1

    while len(digits) > 1 and digits[0] == 0:
        del digits[0]
        dec_pos -= 1

    return dec_pos, digits


def free_format(coefficient, exponent, rounding, min_exponent, precision,
                input_radix, output_radix, all_digits=False, any_rounding=False):
    '''Return (dec_pos, digits) for the positive value coefficient * input_radix^exponent.
    See float_to_digits().  Unless all_digits is set, trailing zeroes left by a carry are
    dropped.'''
    dec_pos, round_needed, digits = float_to_digits(
        coefficient, exponent, rounding, min_exponent, precision, input_radix,
        output_radix, all_digits, any_rounding)
    dec_pos, digits = adjust(dec_pos, round_needed, digits, output_radix)
    if not all_digits:
        while len(digits) > 1 and digits[-1] == 0:
            digits.pop()
    return dec_pos, digits
