#
# Rounding modes and the rounding decision shared by every radix.
#

__all__ = ('ROUND_CEILING', 'ROUND_FLOOR', 'ROUND_DOWN', 'ROUND_UP',
           'ROUND_HALF_EVEN', 'ROUND_HALF_UP', 'ROUND_HALF_DOWN', 'ALL_ROUNDINGS')


# Rounding modes
ROUND_CEILING   = 'ROUND_CEILING'       # Towards +infinity
ROUND_FLOOR     = 'ROUND_FLOOR'         # Towards -infinity
ROUND_DOWN      = 'ROUND_DOWN'          # Towards zero
ROUND_UP        = 'ROUND_UP'            # Away from zero
ROUND_HALF_EVEN = 'ROUND_HALF_EVEN'     # To nearest with ties towards even
ROUND_HALF_DOWN = 'ROUND_HALF_DOWN'     # To nearest with ties towards zero
ROUND_HALF_UP   = 'ROUND_HALF_UP'       # To nearest with ties away from zero

ALL_ROUNDINGS = (ROUND_CEILING, ROUND_FLOOR, ROUND_DOWN, ROUND_UP,
                 ROUND_HALF_EVEN, ROUND_HALF_DOWN, ROUND_HALF_UP)
NEAREST_ROUNDINGS = frozenset((ROUND_HALF_EVEN, ROUND_HALF_DOWN, ROUND_HALF_UP))


# When digits are discarded these indicate what fraction of a unit in the last retained
# place they represented.  It combines the roles of 'guard' and 'sticky' digits.
LF_EXACTLY_ZERO = 0           # 000000
LF_LESS_THAN_HALF = 1         # 0xxxxx  x's not all zero
LF_EXACTLY_HALF = 2           # 500000
LF_MORE_THAN_HALF = 3         # 5xxxxx  x's not all zero


def lost_fraction(remainder, unit):
    '''Classify remainder, a value in [0, unit), as one of the LF_ constants.'''
    if remainder == 0:
        return LF_EXACTLY_ZERO
    twice = remainder * 2
    if twice < unit:
        return LF_LESS_THAN_HALF
    if twice == unit:
        return LF_EXACTLY_HALF
    return LF_MORE_THAN_HALF


def flip_directed(rounding, sign):
    '''Return the rounding to apply to the magnitude of a number with the given sign.

    Ceiling and floor round the magnitude of a negative number in opposite directions,
    so they are swapped.  Other modes already act on magnitudes.'''
    if sign < 0:
        if rounding == ROUND_CEILING:
            return ROUND_FLOOR
        if rounding == ROUND_FLOOR:
            return ROUND_CEILING
    return rounding


def round_up(rounding, lost_fraction, sign, is_odd):
    '''Return True if, when an operation is inexact, the result should be rounded up (i.e.,
    away from zero by incrementing the coefficient).

    sign is the sign of the number (+1 or -1), and is_odd indicates if the last retained
    digit is odd, which is needed for ties-to-even rounding.
    '''
    if lost_fraction == LF_EXACTLY_ZERO:
        return False

    if rounding == ROUND_HALF_EVEN:
        if lost_fraction == LF_EXACTLY_HALF:
            return is_odd
        else:
            return lost_fraction == LF_MORE_THAN_HALF
    elif rounding == ROUND_CEILING:
        return sign > 0
    elif rounding == ROUND_FLOOR:
        return sign < 0
    elif rounding == ROUND_DOWN:
        return False
    elif rounding == ROUND_UP:
        return True
    elif rounding == ROUND_HALF_DOWN:
        return lost_fraction == LF_MORE_THAN_HALF
    else:
        return lost_fraction != LF_LESS_THAN_HALF
