#
# radixnum - arbitrary-precision binary and decimal floating point under explicit contexts
#

from .rounding import *
from .radix import *
from .signals import *
from .num import *
from .digits import *
from .text import *
from .convert import *

__version__ = '0.1.0'
