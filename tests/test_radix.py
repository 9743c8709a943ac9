from fractions import Fraction

import pytest

from radixnum import *
from radixnum.rounding import (LF_EXACTLY_ZERO, LF_LESS_THAN_HALF, LF_EXACTLY_HALF,
                               LF_MORE_THAN_HALF, flip_directed, lost_fraction, round_up)


class TestRounding:

    @pytest.mark.parametrize('remainder, unit, answer', (
        (0, 10, LF_EXACTLY_ZERO),
        (4, 10, LF_LESS_THAN_HALF),
        (5, 10, LF_EXACTLY_HALF),
        (6, 10, LF_MORE_THAN_HALF),
        (1, 2, LF_EXACTLY_HALF),
    ))
    def test_lost_fraction(self, remainder, unit, answer):
        assert lost_fraction(remainder, unit) == answer

    @pytest.mark.parametrize('rounding, lf, sign, is_odd, answer', (
        (ROUND_HALF_EVEN, LF_EXACTLY_HALF, 1, True, True),
        (ROUND_HALF_EVEN, LF_EXACTLY_HALF, 1, False, False),
        (ROUND_HALF_EVEN, LF_MORE_THAN_HALF, -1, False, True),
        (ROUND_HALF_EVEN, LF_LESS_THAN_HALF, 1, True, False),
        (ROUND_HALF_UP, LF_EXACTLY_HALF, -1, False, True),
        (ROUND_HALF_UP, LF_LESS_THAN_HALF, 1, False, False),
        (ROUND_HALF_DOWN, LF_EXACTLY_HALF, 1, True, False),
        (ROUND_HALF_DOWN, LF_MORE_THAN_HALF, 1, False, True),
        (ROUND_CEILING, LF_LESS_THAN_HALF, 1, False, True),
        (ROUND_CEILING, LF_LESS_THAN_HALF, -1, False, False),
        (ROUND_FLOOR, LF_LESS_THAN_HALF, 1, False, False),
        (ROUND_FLOOR, LF_LESS_THAN_HALF, -1, False, True),
        (ROUND_UP, LF_LESS_THAN_HALF, -1, False, True),
        (ROUND_DOWN, LF_MORE_THAN_HALF, 1, True, False),
        (ROUND_UP, LF_EXACTLY_ZERO, 1, True, False),
    ))
    def test_round_up(self, rounding, lf, sign, is_odd, answer):
        assert round_up(rounding, lf, sign, is_odd) is answer

    @pytest.mark.parametrize('rounding, sign, answer', (
        (ROUND_CEILING, -1, ROUND_FLOOR),
        (ROUND_FLOOR, -1, ROUND_CEILING),
        (ROUND_CEILING, 1, ROUND_CEILING),
        (ROUND_FLOOR, 1, ROUND_FLOOR),
        (ROUND_HALF_EVEN, -1, ROUND_HALF_EVEN),
        (ROUND_UP, -1, ROUND_UP),
    ))
    def test_flip_directed(self, rounding, sign, answer):
        assert flip_directed(rounding, sign) == answer


class TestRadix:

    def test_radix_for(self):
        assert radix_for(2) is BINARY
        assert radix_for(10) is DECIMAL
        assert radix_for(DECIMAL) is DECIMAL
        for base in (3, 16, '2', None):
            with pytest.raises(ValueError):
                radix_for(base)

    @pytest.mark.parametrize('radix, n, answer', (
        (BINARY, 3, 8),
        (BINARY, 0, 1),
        (BINARY, -3, Fraction(1, 8)),
        (DECIMAL, 3, 1000),
        (DECIMAL, -2, Fraction(1, 100)),
    ))
    def test_int_power(self, radix, n, answer):
        assert radix.int_power(n) == answer

    @pytest.mark.parametrize('radix, x, n, answer', (
        (BINARY, 7, -1, 3),
        (BINARY, 7, 2, 28),
        (DECIMAL, 123, -1, 12),
        (DECIMAL, 5, 2, 500),
        (DECIMAL, 5, 0, 5),
    ))
    def test_int_mul_power(self, radix, x, n, answer):
        assert radix.int_mul_power(x, n) == answer
        assert radix.int_div_power(x, -n) == answer

    @pytest.mark.parametrize('radix, x, answer', (
        (BINARY, 0, 0),
        (BINARY, 1, 1),
        (BINARY, 8, 4),
        (DECIMAL, 0, 0),
        (DECIMAL, 9, 1),
        (DECIMAL, 10, 2),
        (DECIMAL, 10 ** 50, 51),
    ))
    def test_number_of_digits(self, radix, x, answer):
        assert radix.number_of_digits(x) == answer

    @pytest.mark.parametrize('radix, x, answer', (
        (BINARY, 64, True),
        (BINARY, 1, True),
        (BINARY, 12, False),
        (BINARY, 0, False),
        (DECIMAL, 100, True),
        (DECIMAL, 20, False),
        (DECIMAL, 0, False),
    ))
    def test_is_power(self, radix, x, answer):
        assert radix.is_power(x) is answer

    @pytest.mark.parametrize('radix, x, n, answer', (
        (DECIMAL, 12345, 2, (123, LF_LESS_THAN_HALF)),
        (DECIMAL, 12350, 2, (123, LF_EXACTLY_HALF)),
        (DECIMAL, 12351, 2, (123, LF_MORE_THAN_HALF)),
        (DECIMAL, 12300, 2, (123, LF_EXACTLY_ZERO)),
        (DECIMAL, 5, 10, (0, LF_LESS_THAN_HALF)),
        (DECIMAL, 12, -2, (1200, LF_EXACTLY_ZERO)),
        (BINARY, 0b1011, 2, (0b10, LF_MORE_THAN_HALF)),
        (BINARY, 0b1010, 2, (0b10, LF_EXACTLY_HALF)),
    ))
    def test_lost_digits(self, radix, x, n, answer):
        assert radix.lost_digits(x, n) == answer

    @pytest.mark.parametrize('radix, denominator, answer', (
        (DECIMAL, 8, 3),
        (DECIMAL, 1, 0),
        (DECIMAL, 3, None),
        (DECIMAL, 40, 3),
        (BINARY, 10, None),
        (BINARY, 1024, 10),
    ))
    def test_exact_power(self, radix, denominator, answer):
        assert radix.exact_power(denominator) == answer

    @pytest.mark.parametrize('radix, args, answer', (
        (DECIMAL, (1200, -3), (12, -1)),
        (DECIMAL, (1200, -3, -2), (120, -2)),
        (DECIMAL, (0, 5), (0, 5)),
        (BINARY, (12, 0), (3, 2)),
        (BINARY, (12, 0, 1), (6, 1)),
        (BINARY, (12, 3, 1), (12, 3)),
    ))
    def test_strip_zeros(self, radix, args, answer):
        assert radix.strip_zeros(*args) == answer
