from decimal import Decimal
from fractions import Fraction

import pytest

from radixnum import *


float_values = (0.1, 1 / 3, 123.456, -2.5, 1e300, 1e-300, 5e-324, 1.7976931348623157e308)


def binary(value):
    return Num.from_float(value, BINARY)


def decimal(sign, coefficient, exponent):
    return Num.from_triple(sign, coefficient, exponent, DECIMAL)


class TestConstructors:

    def test_from_int(self):
        assert from_int(-7, DECIMAL).as_tuple() == (-1, 7, 0)

    def test_from_float(self):
        assert from_float(0.25, BINARY).as_tuple() == (1, 1 << 52, -54)
        assert from_float(0.25, DECIMAL).as_tuple() == (1, 25, -2)

    def test_from_triple(self):
        assert from_triple(-1, 5, -3, DECIMAL).as_tuple() == (-1, 5, -3)

    @pytest.mark.parametrize('numerator, denominator, answer', (
        (1, 3, 1 / 3),
        (-1, 4, -0.25),
        (1, -4, -0.25),
        (0, 5, 0.0),
        (10 ** 400, 10 ** 399, 10.0),
    ))
    def test_from_rational(self, numerator, denominator, answer):
        assert from_rational(numerator, denominator, IEEEDoubleContext.copy()) == answer

    def test_from_rational_errors(self):
        with pytest.raises(TypeError):
            from_rational(1.0, 3)
        with pytest.raises(ZeroDivisionError):
            from_rational(1, 0)

    def test_from_rational_exact(self):
        context = Context(radix=BINARY, precision=EXACT)
        assert from_rational(3, 8, context).as_tuple() == (1, 3, -3)
        assert from_rational(6, 16, context).as_tuple() == (1, 3, -3)
        assert context.flags == 0
        assert from_rational(1, 3, context).is_qnan()
        assert context.flags == Flags.INVALID_OPERATION

    def test_from_rational_exact_trapped(self):
        context = Context(radix=DECIMAL, precision=EXACT, traps=Flags.INVALID_OPERATION)
        assert from_rational(1, 8, context).as_tuple() == (1, 125, -3)
        with pytest.raises(NotRepresentable):
            from_rational(1, 3, context)

    def test_from_fraction(self):
        context = DecimalDefaultContext.copy()
        assert from_fraction(Fraction(1, 8), context).as_tuple() == (1, 125, -3)
        assert context.flags == 0
        assert from_fraction(Fraction(-2, 3), context).as_tuple() == (-1, int('6' * 27 + '7'),
                                                                      -28)
        assert context.flags == Flags.INEXACT | Flags.ROUNDED


class TestFromValue:

    @pytest.mark.parametrize('value, answer', (
        (3, 3.0),
        (0.5, 0.5),
        (Fraction(1, 3), 1 / 3),
        (Decimal('0.1'), 0.1),
        (Decimal('-1.5E+3'), -1500.0),
        ('0.1', 0.1),
        ('-Infinity', float('-inf')),
    ))
    def test_binary(self, value, answer):
        assert from_value(value, IEEEDoubleContext.copy()) == answer

    def test_num(self):
        context = IEEEDoubleContext.copy()
        value = binary(0.1)
        assert from_value(value, context) is value
        assert from_value(decimal(1, 1, -1), context) == 0.1
        assert context.flags == Flags.INEXACT | Flags.ROUNDED

    def test_num_to_decimal(self):
        context = DecimalDefaultContext.copy()
        assert from_value(binary(0.5), context).as_tuple() == (1, 5, -1)
        minus_zero = from_value(binary(-0.0), context)
        assert minus_zero.is_zero() and minus_zero.sign == -1
        infinity = from_value(Num.infinity(-1, BINARY), context)
        assert infinity.is_infinite() and infinity.radix is DECIMAL

    def test_ambient_context(self):
        with local_context(DecimalDefaultContext):
            assert from_value(7).radix is DECIMAL

    @pytest.mark.parametrize('value', ([], None, 1j))
    def test_unsupported(self, value):
        with pytest.raises(TypeError):
            from_value(value, IEEEDoubleContext.copy())


class TestOtherRadix:

    def test_exact_point_one(self):
        context = IEEEDoubleContext.copy()
        result = to_other_radix_exact(binary(0.1), context=context)
        assert result.radix is DECIMAL
        assert str(result) == '0.1000000000000000055511151231257827021181583404541015625'
        assert context.flags == 0

    @pytest.mark.parametrize('value', float_values)
    def test_exact_round_trip(self, value):
        number = binary(value)
        other = to_other_radix_exact(number)
        assert other.radix is DECIMAL
        assert other == number
        back = to_other_radix_exact(other)
        assert back.radix is BINARY
        assert back == number

    def test_exact_decimal(self):
        assert to_other_radix_exact(decimal(-1, 5, -1)).as_tuple() == (-1, 1, -1)
        assert to_other_radix_exact(decimal(1, 12, 3)).as_tuple() == (1, 12000, 0)

    def test_exact_not_representable(self):
        context = DecimalDefaultContext.copy()
        with pytest.raises(NotRepresentable):
            to_other_radix_exact(decimal(1, 1, -1), context=context)
        assert context.flags == Flags.INVALID_OPERATION

        context = DecimalExtendedContext.copy()
        result = to_other_radix_exact(decimal(1, 1, -1), context=context)
        assert result.is_qnan() and result.radix is BINARY
        assert context.flags == Flags.INVALID_OPERATION

    def test_exact_specials(self):
        result = to_other_radix_exact(Num.infinity(-1, BINARY))
        assert result.is_infinite() and result.sign == -1 and result.radix is DECIMAL
        result = to_other_radix_exact(Num.nan(5, radix=DECIMAL))
        assert result.is_qnan() and result.nan_payload() == 5 and result.radix is BINARY

    def test_exact_explicit_radix(self):
        result = to_other_radix_exact(binary(0.5), radix=2)
        assert result.radix is BINARY and result == 0.5

    def test_approx(self):
        result = to_other_radix_approx(binary(0.1))
        assert result.radix is DECIMAL
        assert result.as_tuple() == (1, 1, -1)

    def test_approx_any_rounding(self):
        result = to_other_radix_approx(binary(0.1), any_rounding=True)
        assert result.as_tuple() == to_other_radix_exact(binary(0.1)).as_tuple()

    def test_approx_decimal(self):
        result = to_other_radix_approx(decimal(1, 1, -1), context=DecimalDefaultContext)
        assert result.radix is BINARY
        assert result == Fraction(1, 8)
        back = from_value(result, DecimalDefaultContext.derive(precision=1))
        assert back.as_tuple() == (1, 1, -1)

    def test_approx_zero(self):
        result = to_other_radix_approx(binary(-0.0))
        assert result.is_zero() and result.sign == -1 and result.radix is DECIMAL

    @pytest.mark.parametrize('value', float_values)
    @pytest.mark.parametrize('rounding', (ROUND_HALF_EVEN, ROUND_DOWN, ROUND_CEILING))
    def test_approx_round_trip(self, value, rounding):
        context = IEEEDoubleContext.derive(rounding=rounding)
        result = to_other_radix_approx(binary(value), context=context)
        assert result.radix is DECIMAL
        assert from_value(result, context) == binary(value)

    def test_to_float(self):
        assert to_float(decimal(1, 1, -1)) == 0.1
        assert to_float(binary(-2.5)) == -2.5
