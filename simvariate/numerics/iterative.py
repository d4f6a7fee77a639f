#===============================================================================
# MODULE iterative
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines iterate(), the generic "step until converged" loop shared by the
# continued fraction evaluator and the bisection root finder, along with
# the IterationResult it returns.
#
# A step is any callable that performs one iteration of some calculation
# and returns the precision achieved by that iteration. Iteration stops
# when the convergence predicate is satisfied or the iteration limit is
# reached; reaching the limit is reported via the result, not raised.
#===============================================================================
__all__ = ['iterate', 'IterationResult', 'relative_precision']

from typing import NamedTuple

from simvariate.core.simexception import SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc, apidocskip
from simvariate.core import numenv

logger = SimLogging.get_logger(__name__)

_ERROR_NAME = "Iterative Process Error"


class IterationResult(NamedTuple):
    """
    Outcome of :func:`iterate`
    """
    iterations: int
    precision: float
    converged: bool


@apidoc
def iterate(step, has_converged=None, desired_precision=None,
            max_iterations=100, environment=None):
    """
    Call ``step()`` until ``has_converged(precision)`` returns True or
    ``max_iterations`` steps have been taken.
    
    :param step:              One iteration of the calculation; returns the
                              precision achieved by that iteration.
    :type step:               callable ``() -> float``
    
    :param has_converged:     Convergence predicate applied to the precision
                              returned by each step. Defaults to
                              ``precision < desired_precision``.
    :type has_converged:      callable ``(float) -> bool`` or None
    
    :param desired_precision: Precision used by the default convergence
                              predicate. Defaults to the environment's
                              default precision.
    :type desired_precision:  `float` or None
    
    :param max_iterations:    Iteration limit, must be > 0
    :type max_iterations:     `int`
    
    :param environment:       Numeric environment supplying the default
                              precision
    :type environment:        :class:`~.numenv.NumericEnvironment` or None
    
    :return: Number of iterations taken, last precision and convergence flag
    :rtype:  :class:`IterationResult`
    
    """
    if max_iterations <= 0:
        msg = "The maximum number of iterations ({0}) must be > 0"
        raise SimDomainError(_ERROR_NAME, msg, max_iterations)
    
    if has_converged is None:
        if desired_precision is None:
            desired_precision = numenv.resolve(environment).default_precision
        if desired_precision <= 0:
            msg = "The desired precision ({0}) must be > 0"
            raise SimDomainError(_ERROR_NAME, msg, desired_precision)
        has_converged = lambda precision: precision < desired_precision
    
    iterations = 0
    precision = float('inf')
    converged = False
    while iterations < max_iterations:
        iterations += 1
        precision = step()
        if has_converged(precision):
            converged = True
            break
        
    if not converged:
        logger.debug("Iteration limit (%d) reached; precision %g",
                     max_iterations, precision)
    return IterationResult(iterations, precision, converged)


@apidocskip
def relative_precision(absolute_precision, value, environment=None):
    """
    Return ``absolute_precision`` relative to ``value`` (see
    :meth:`~.numenv.NumericEnvironment.relative_precision`).
    """
    return numenv.resolve(environment).relative_precision(absolute_precision, value)
