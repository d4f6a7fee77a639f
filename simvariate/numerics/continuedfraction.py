#===============================================================================
# MODULE continuedfraction
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines the ContinuedFraction class, which evaluates a continued fraction
#
#     b0 + a1/(b1 + a2/(b2 + ...))
#
# via the modified Lentz algorithm. The caller supplies the initial value
# and a function returning, for each iteration n >= 1, the pair of factors
# (factor0, factor1) = (a_n, b_n).
#
# Every intermediate numerator and denominator passes through _guard(),
# which replaces values smaller in magnitude than the numeric environment's
# small_number with small_number; this keeps the recurrence from dividing
# by (or through) zero.
#===============================================================================
__all__ = ['ContinuedFraction', 'ContinuedFractionResult']

from typing import NamedTuple

from simvariate.core.simexception import SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc, apidocskip
from simvariate.core import numenv
import simvariate.core.configuration as simconfig
from simvariate.numerics.iterative import iterate

logger = SimLogging.get_logger(__name__)

_ERROR_NAME = "Continued Fraction Error"


class ContinuedFractionResult(NamedTuple):
    """
    Outcome of :meth:`ContinuedFraction.evaluate`. ``value`` is the best
    estimate obtained, whether or not the evaluation converged.
    """
    value: float
    iterations: int
    precision: float
    converged: bool


@apidoc
class ContinuedFraction(object):
    """
    Evaluates a continued fraction to a desired precision. Non-convergence
    within the iteration limit is not an error; :meth:`evaluate` returns
    the estimate along with the precision achieved, and it is up to the
    caller to decide whether that is good enough.
    
    :param factors:           Function of the iteration number n (starting
                              at 1) returning the pair (factor0, factor1),
                              the partial numerator and denominator terms.
    :type factors:            callable ``(int) -> (float, float)``
    
    :param initial_value:     b0, the leading term of the fraction
    :type initial_value:      `float`
    
    :param desired_precision: Convergence threshold on ``|delta - 1|``.
                              Defaults to the environment default precision.
    :type desired_precision:  `float` or None
    
    :param max_iterations:    Iteration limit. Defaults to the [Numerics]
                              ContinuedFractionIterations setting (100)
    :type max_iterations:     `int` or None
    
    :param environment:       Numeric environment
    :type environment:        :class:`~.numenv.NumericEnvironment` or None
    
    """
    def __init__(self, factors, initial_value=0.0, desired_precision=None,
                 max_iterations=None, environment=None):
        self._env = numenv.resolve(environment)
        if desired_precision is None:
            desired_precision = self._env.default_precision
        if max_iterations is None:
            max_iterations = simconfig.get_continued_fraction_iterations()
        if desired_precision <= 0:
            msg = "The desired precision ({0}) must be > 0"
            raise SimDomainError(_ERROR_NAME, msg, desired_precision)
        if max_iterations <= 0:
            msg = "The maximum number of iterations ({0}) must be > 0"
            raise SimDomainError(_ERROR_NAME, msg, max_iterations)
        
        self.factors = factors
        self.initial_value = initial_value
        self.desired_precision = desired_precision
        self.max_iterations = max_iterations
        
    def _guard(self, r):
        small = self._env.small_number
        return small if abs(r) < small else r
        
    def evaluate(self):
        """
        Evaluate the continued fraction.
        
        :return: The estimated value, iterations used, achieved precision
                 and convergence flag
        :rtype:  :class:`ContinuedFractionResult`
        
        """
        guard = self._guard
        factors = self.factors
        
        # Evaluation state, local to this call
        numerator = guard(self.initial_value)
        denominator = 0.0
        result = numerator
        n = 0
        
        def step():
            nonlocal numerator, denominator, result, n
            n += 1
            f0, f1 = factors(n)
            denominator = 1.0 / guard(f0 * denominator + f1)
            numerator = guard(f0 / numerator + f1)
            delta = numerator * denominator
            result *= delta
            return abs(delta - 1.0)
        
        outcome = iterate(step, desired_precision=self.desired_precision,
                          max_iterations=self.max_iterations,
                          environment=self._env)
        if not outcome.converged:
            logger.debug("Continued fraction did not converge: %d iterations, precision %g",
                         outcome.iterations, outcome.precision)
        return ContinuedFractionResult(result, outcome.iterations,
                                       outcome.precision, outcome.converged)
