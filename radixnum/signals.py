#
# Status flags and the conditions signalled by arithmetic operations.
#

from enum import IntFlag

__all__ = ('Flags', 'NumError', 'InvalidOperation', 'SignalingNaNOperand', 'InvalidAdd',
           'InvalidMultiply', 'DivisionUndefined', 'InvalidDecomposition',
           'NotRepresentable', 'DivisionByZero', 'Overflow', 'Underflow', 'Inexact',
           'Rounded', 'Clamped')


class Flags(IntFlag):
    '''Operation status flags.  Also used to name the trapped and ignored conditions of a
    context.'''
    CLAMPED           = 0x01
    DIVISION_BY_ZERO  = 0x02
    INEXACT           = 0x04
    INVALID_OPERATION = 0x08
    OVERFLOW          = 0x10
    ROUNDED           = 0x20
    UNDERFLOW         = 0x40


class NumError(ArithmeticError):
    '''All arithmetic exceptions signalled by this package subclass from this.

    NumError expects two arguments:

         def __init__(self, op_tuple, result):

    op_tuple is a tuple of the operation name and operands causing the signal.  result is
    what the operation delivers when the condition is not trapped.
    '''

    flag_to_raise = Flags(0)

    @property
    def op_tuple(self):
        return self.args[0]

    @property
    def default_result(self):
        return self.args[1]

    def signal(self, context):
        '''Signal the condition on context.  Unless the condition is ignored by the context its
        flag is raised; if the context also traps it, raise self.  Otherwise return the
        default result.'''
        flag = self.flag_to_raise
        if flag & context.ignored_flags:
            return self.default_result
        context.flags |= flag
        if flag & context.traps:
            raise self
        return self.default_result


#
# InvalidOperation - many sub-exceptions.  The default result is a quiet NaN.
#

class InvalidOperation(NumError):
    '''Signalled when an operation has no usefully definable result.'''

    flag_to_raise = Flags.INVALID_OPERATION


class SignalingNaNOperand(InvalidOperation):
    '''Signalled when an operand is a signaling NaN.'''


class InvalidAdd(InvalidOperation):
    '''Signalled when adding two differently-signed infinities or subtracting two like-signed
    infinities.'''


class InvalidMultiply(InvalidOperation):
    '''Signalled when multiplying a zero and an infinity.'''


class DivisionUndefined(InvalidOperation):
    '''Signalled when dividing two zeros or two infinities.'''


class InvalidDecomposition(InvalidOperation):
    '''Signalled when a sign, coefficient, exponent triple does not describe a value.'''


class NotRepresentable(InvalidOperation):
    '''Signalled when an exact result was required but has no finite expansion in the
    destination radix.'''


#
# DivisionByZero
#

class DivisionByZero(NumError, ZeroDivisionError):
    '''Signalled when a finite non-zero dividend is divided by zero.  The default result is a
    signed infinity.'''

    flag_to_raise = Flags.DIVISION_BY_ZERO


#
# Rounded and Inexact.  Inexact implies rounded.
#

class Rounded(NumError):
    '''Signalled when digits were discarded, whether or not they were zero.'''

    flag_to_raise = Flags.ROUNDED


class Inexact(NumError):
    '''Signalled when the infinitely precise result cannot be represented.'''

    flag_to_raise = Flags.INEXACT

    def signal(self, context):
        result = super().signal(context)
        return Rounded(self.op_tuple, result).signal(context)


class Clamped(NumError):
    '''Signalled when an exponent was altered to fit the context's bounds.'''

    flag_to_raise = Flags.CLAMPED


#
# Overflow and Underflow.  Both are inexact.
#

class Overflow(NumError):
    '''Signalled when, after rounding, the adjusted exponent would exceed emax.  The default
    result is either infinity or the finite value of greatest magnitude, depending on the
    rounding mode and sign.'''

    flag_to_raise = Flags.OVERFLOW

    def signal(self, context):
        result = super().signal(context)
        return Inexact(self.op_tuple, result).signal(context)


class Underflow(NumError):
    '''Signalled when a subnormal result had to be rounded.'''

    flag_to_raise = Flags.UNDERFLOW

    def signal(self, context):
        result = super().signal(context)
        return Inexact(self.op_tuple, result).signal(context)
