#===============================================================================
# MODULE numenv
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines the NumericEnvironment class, which determines the floating-point
# characteristics of the host (radix, machine precision, smallest and
# largest representable numbers) by probing floating point arithmetic
# directly, rather than trusting sys.float_info. These values drive the
# convergence thresholds used by the continued fraction, root finding and
# special function code.
#
# Values are computed lazily, on first access, and cached until reset() is
# called. Numerical code takes an (optional) environment argument, so tests
# or clients can supply their own instance; when none is supplied, the
# module-level default environment is used.
#===============================================================================
__all__ = ['NumericEnvironment', 'default_environment']

import math

from simvariate.core.simexception import SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc, apidocskip
import simvariate.core.configuration as simconfig

logger = SimLogging.get_logger(__name__)

_ERROR_NAME = "Numeric Environment Error"


@apidoc
class NumericEnvironment(object):
    """
    A lazily-initialized set of machine floating point constants. Once
    computed, a value is never recomputed unless :meth:`reset` is called.
    
    :param max_iterations: Global iteration limit used by the special
                           functions. Defaults to the [Numerics]
                           MaxIterations configuration setting (200)
    :type max_iterations:  `int` or None
    
    """
    __slots__ = ('_cache', '_max_iterations')
    
    def __init__(self, max_iterations=None):
        self._cache = {}
        if max_iterations is None:
            max_iterations = simconfig.get_max_iterations()
        self.max_iterations = max_iterations

    def _cached(self, key, compute):
        try:
            return self._cache[key]
        except KeyError:
            value = compute()
            self._cache[key] = value
            logger.debug("NumericEnvironment %s computed: %r", key, value)
            return value
        
    def reset(self):
        """
        Clear all of the cached values, forcing them to be recomputed on
        next access.
        """
        self._cache.clear()
        
    @property
    def max_iterations(self):
        """
        The maximum number of iterations allowed by special function
        evaluations (series expansions and the like).
        """
        return self._max_iterations
    
    @max_iterations.setter
    def max_iterations(self, iterations):
        if iterations <= 0:
            msg = "The maximum number of iterations ({0}) must be > 0"
            raise SimDomainError(_ERROR_NAME, msg, iterations)
        self._max_iterations = iterations

    @property
    def radix(self):
        """
        The radix (base) of the floating point representation.
        """
        return self._cached('radix', self._compute_radix)
        
    @property
    def machine_epsilon(self):
        """
        The largest power of the radix, eps, for which 1 + eps == 1
        """
        return self._cached('machine_epsilon', self._compute_machine_epsilon)
    
    @property
    def negative_machine_epsilon(self):
        """
        The largest power of the radix, eps, for which 1 - eps == 1
        """
        return self._cached('negative_machine_epsilon',
                            self._compute_negative_machine_epsilon)
    
    @property
    def smallest_number(self):
        """
        The smallest positive representable number.
        """
        return self._cached('smallest_number', self._compute_smallest_number)
    
    @property
    def largest_number(self):
        """
        The largest finite representable number.
        """
        return self._cached('largest_number', self._compute_largest_number)
    
    @property
    def default_precision(self):
        """
        The default relative precision for iterative calculations: the
        square root of the machine epsilon.
        """
        return self._cached('default_precision',
                            lambda: math.sqrt(self.machine_epsilon))
    
    @property
    def small_number(self):
        """
        A number that can be added to a quantity to avoid division by
        zero without materially changing it: the square root of the
        smallest representable number.
        """
        return self._cached('small_number',
                            lambda: math.sqrt(self.smallest_number))
    
    @property
    def largest_exponential_argument(self):
        """
        The largest x for which exp(x) is finite
        """
        return self._cached('largest_exponential_argument',
                            lambda: math.log(self.largest_number))
    
    @property
    def smallest_exponential_argument(self):
        """
        The smallest x for which exp(x) is non-zero
        """
        return self._cached('smallest_exponential_argument',
                            lambda: math.log(self.smallest_number))
    
    # camelCase accessors, for code ported from (or documented against)
    # the function-style interface
    def defaultPrecision(self): return self.default_precision
    def smallNumber(self): return self.small_number
    def machineEpsilon(self): return self.machine_epsilon
    def largestNumber(self): return self.largest_number
    
    def equal(self, a, b, precision=None):
        """
        Returns True if a and b are equal within a relative precision
        (or if both are smaller in magnitude than that precision).
        """
        if precision is None:
            precision = self.default_precision
        norm = max(abs(a), abs(b))
        return norm < precision or abs(a - b) < precision * norm
    
    def relative_precision(self, absolute_precision, value):
        """
        Returns the absolute precision relative to the magnitude of value,
        unless value is too small for that to be meaningful.
        """
        if abs(value) > self.default_precision:
            return absolute_precision / abs(value)
        return absolute_precision

    def _compute_radix(self):
        a = 1.0
        while True:
            a += a
            tmp1 = a + 1.0
            tmp2 = tmp1 - a
            if tmp2 - 1.0 != 0.0:
                break
        b = 1.0
        radix = 0
        while radix == 0:
            b += b
            tmp1 = a + b
            radix = int(tmp1 - a)
        return radix
    
    def _compute_machine_epsilon(self):
        inverse_radix = 1.0 / self.radix
        eps = 1.0
        while (1.0 + eps) - 1.0 != 0.0:
            eps *= inverse_radix
        return eps
    
    def _compute_negative_machine_epsilon(self):
        inverse_radix = 1.0 / self.radix
        eps = 1.0
        while (1.0 - eps) - 1.0 != 0.0:
            eps *= inverse_radix
        return eps
    
    def _full_mantissa_number(self):
        return 1.0 - self.radix * self.negative_machine_epsilon
    
    def _compute_smallest_number(self):
        inverse_radix = 1.0 / self.radix
        number = self._full_mantissa_number()
        smallest = number
        while number != 0.0:
            smallest = number
            number *= inverse_radix
        return smallest
    
    def _compute_largest_number(self):
        radix = float(self.radix)
        number = self._full_mantissa_number()
        largest = number
        while not math.isinf(number):
            largest = number
            number *= radix
        return largest
    
    def __repr__(self):
        return 'NumericEnvironment(radix={0}, machine_epsilon={1}, default_precision={2})'.format(
            self.radix, self.machine_epsilon, self.default_precision)


_default_environment = None

@apidoc
def default_environment():
    """
    Return the module-level default :class:`NumericEnvironment`, creating
    it on first call.
    """
    global _default_environment
    if _default_environment is None:
        _default_environment = NumericEnvironment()
    return _default_environment

@apidocskip
def resolve(environment):
    """
    Return the passed environment, or the default environment if None.
    """
    return default_environment() if environment is None else environment
