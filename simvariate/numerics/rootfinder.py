#===============================================================================
# MODULE rootfinder
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines the BisectionRootFinder class, a bracketing root finder for
# continuous functions, along with the bracket helpers find_interval() and
# has_root().
#
# Used wherever a distribution function has no closed form inverse (e.g.
# the beta inverse CDF, and as a fallback for the chi-square inverse).
#===============================================================================
__all__ = ['BisectionRootFinder', 'RootFinderState', 'RootFinderResult',
           'find_interval', 'has_root']

from enum import Enum
from typing import NamedTuple

from simvariate.core.simexception import SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc, apidocskip
from simvariate.core import numenv
import simvariate.core.configuration as simconfig
from simvariate.numerics.iterative import iterate

logger = SimLogging.get_logger(__name__)

_ERROR_NAME = "Root Finder Error"


@apidoc
class RootFinderState(Enum):
    """
    Life cycle of a :class:`BisectionRootFinder`
    """
    INITIALIZED = 'Initialized'
    ITERATING = 'Iterating'
    CONVERGED = 'Converged'
    MAX_ITERATIONS_REACHED = 'MaxIterationsReached'
    

class RootFinderResult(NamedTuple):
    """
    Outcome of :meth:`BisectionRootFinder.evaluate`
    """
    root: float
    iterations: int
    precision: float
    converged: bool


@apidoc
def has_root(func, lower, upper):
    """
    Returns True if func(lower) and func(upper) have opposite signs (or
    either is zero), i.e. if the interval is known to bracket a root.
    """
    return func(lower) * func(upper) <= 0.0


@apidoc
def find_interval(func, interval, max_tries=50, expansion=1.6):
    """
    Expand an interval geometrically until it brackets a root of func.
    Alternately extends whichever end has the smaller function value in
    magnitude.
    
    :param func:      The function
    :type func:       callable ``(float) -> float``
    
    :param interval:  Initial interval (lower, upper), lower < upper
    :type interval:   `tuple`
    
    :param max_tries: Maximum number of expansions
    :type max_tries:  `int`
    
    :param expansion: Expansion factor
    :type expansion:  `float`
    
    :return: A bracketing interval, or None if none was found
    :rtype:  `tuple` (float, float) or None
    
    """
    x1, x2 = interval
    if x1 >= x2:
        msg = "Interval lower bound {0} must be less than upper bound {1}"
        raise SimDomainError(_ERROR_NAME, msg, x1, x2)
    
    f1 = func(x1)
    f2 = func(x2)
    for _ in range(max_tries):
        if f1 * f2 < 0.0:
            return x1, x2
        if abs(f1) < abs(f2):
            x1 += expansion * (x1 - x2)
            f1 = func(x1)
        else:
            x2 += expansion * (x2 - x1)
            f2 = func(x2)
    return None


@apidoc
class BisectionRootFinder(object):
    """
    Finds a root of a continuous function within an interval by
    bisection. The function values at the interval endpoints must have
    opposite signs; otherwise there is no guarantee of a root within the
    interval, and construction (or :meth:`set_interval`) raises a
    :class:`~.simexception.SimDomainError`.
    
    Iteration stops when the width of the bracket falls below the desired
    precision, or when the iteration limit is reached. Reaching the limit
    is not an error: :meth:`evaluate` returns the midpoint of the final
    bracket with its convergence flag set False, and :attr:`state` becomes
    ``MAX_ITERATIONS_REACHED``.
    
    :param func:              The function
    :type func:               callable ``(float) -> float``
    
    :param lower:             Lower bound of the bracketing interval
    :type lower:              `float`
    
    :param upper:             Upper bound of the bracketing interval
    :type upper:              `float`
    
    :param initial_point:     Optional starting point within the interval;
                              defaults to the midpoint
    :type initial_point:      `float` or None
    
    :param desired_precision: Bracket width at which to stop. Defaults to
                              the environment default precision.
    :type desired_precision:  `float` or None
    
    :param max_iterations:    Iteration limit. Defaults to the [Numerics]
                              RootFinderIterations setting (100)
    :type max_iterations:     `int` or None
    
    :param environment:       Numeric environment
    :type environment:        :class:`~.numenv.NumericEnvironment` or None
    
    """
    def __init__(self, func, lower, upper, initial_point=None,
                 desired_precision=None, max_iterations=None,
                 environment=None):
        env = numenv.resolve(environment)
        if desired_precision is None:
            desired_precision = env.default_precision
        if max_iterations is None:
            max_iterations = simconfig.get_root_finder_iterations()
        if desired_precision <= 0:
            msg = "The desired precision ({0}) must be > 0"
            raise SimDomainError(_ERROR_NAME, msg, desired_precision)
        if max_iterations <= 0:
            msg = "The maximum number of iterations ({0}) must be > 0"
            raise SimDomainError(_ERROR_NAME, msg, max_iterations)
        
        self._env = env
        self._func = func
        self.desired_precision = desired_precision
        self.max_iterations = max_iterations
        self.set_interval(lower, upper, initial_point)
        
    @property
    def state(self):
        return self._state
    
    @property
    def interval(self):
        """
        The current bracket (lower, upper)
        """
        return min(self._x_neg, self._x_pos), max(self._x_neg, self._x_pos)
        
    def set_interval(self, lower, upper, initial_point=None):
        """
        Set a new bracketing interval and reset the finder to the
        ``INITIALIZED`` state.
        """
        if lower >= upper:
            msg = "Interval lower bound {0} must be less than upper bound {1}"
            raise SimDomainError(_ERROR_NAME, msg, lower, upper)
        
        f_lower = self._func(lower)
        f_upper = self._func(upper)
        if f_lower * f_upper > 0.0:
            msg = "No root in interval [{0}, {1}]: f({0}) = {2}, f({1}) = {3}"
            raise SimDomainError(_ERROR_NAME, msg, lower, upper, f_lower, f_upper)
        
        if initial_point is None:
            initial_point = (lower + upper) / 2.0
        elif not lower <= initial_point <= upper:
            msg = "Initial point {0} is not within interval [{1}, {2}]"
            raise SimDomainError(_ERROR_NAME, msg, initial_point, lower, upper)
        
        if f_lower < 0.0:
            self._x_neg, self._f_neg = lower, f_lower
            self._x_pos, self._f_pos = upper, f_upper
        else:
            self._x_neg, self._f_neg = upper, f_upper
            self._x_pos, self._f_pos = lower, f_lower
            
        self._initial_point = initial_point
        self._result = initial_point
        self._state = RootFinderState.INITIALIZED
        
    def _step(self):
        """
        Replace the bracket endpoint sharing the sign of the function at
        the current point; the new current point is the bracket midpoint.
        Returns the bracket width.
        """
        x = self._result
        fx = self._func(x)
        if fx > 0.0:
            self._x_pos, self._f_pos = x, fx
        else:
            self._x_neg, self._f_neg = x, fx
        self._result = (self._x_pos + self._x_neg) / 2.0
        return abs(self._x_pos - self._x_neg)
        
    def evaluate(self):
        """
        Run the bisection from the current bracket.
        
        :return: Root estimate, iterations used, final bracket width and
                 convergence flag
        :rtype:  :class:`RootFinderResult`
        
        """
        self._state = RootFinderState.ITERATING
        if self._f_neg == 0.0 or self._f_pos == 0.0:
            self._result = self._x_neg if self._f_neg == 0.0 else self._x_pos
            self._state = RootFinderState.CONVERGED
            return RootFinderResult(self._result, 0, 0.0, True)
        
        outcome = iterate(self._step, desired_precision=self.desired_precision,
                          max_iterations=self.max_iterations,
                          environment=self._env)
        if outcome.converged:
            self._state = RootFinderState.CONVERGED
        else:
            self._state = RootFinderState.MAX_ITERATIONS_REACHED
            logger.debug("Bisection stopped after %d iterations; bracket width %g",
                         outcome.iterations, outcome.precision)
        return RootFinderResult(self._result, outcome.iterations,
                                outcome.precision, outcome.converged)
