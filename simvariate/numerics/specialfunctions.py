#===============================================================================
# MODULE specialfunctions
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Special functions needed to invert distribution functions that have no
# closed form inverse:
#
# - log gamma (Lanczos approximation), gamma, digamma, log factorials and
#   binomial coefficients
# - the regularized incomplete gamma function (series for x < a+1,
#   continued fraction otherwise) and the chi-square inverse (AS 91)
# - the log beta function, the regularized incomplete beta function
#   (continued fraction) and the standard beta inverse (AS 109 start,
#   then bisection)
# - the standard normal CDF and inverse (Acklam's algorithm)
# - probability mass, cumulative and inverse cumulative functions for the
#   Poisson, binomial and negative binomial distributions
#
# Functions raise SimDomainError for arguments outside of their domain, and
# SimConvergenceError when an underlying series or continued fraction does
# not converge within its iteration limit.
#===============================================================================
import math

from simvariate.core.simexception import SimDomainError, SimConvergenceError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc, apidocskip
from simvariate.core import numenv
import simvariate.core.configuration as simconfig
from simvariate.numerics.continuedfraction import ContinuedFraction
from simvariate.numerics.rootfinder import BisectionRootFinder, find_interval

logger = SimLogging.get_logger(__name__)

_DOMAIN_ERROR = "Special Function Domain Error"
_CONVERGENCE_ERROR = "Special Function Convergence Error"

_SQRT_2PI = math.sqrt(2.0 * math.pi)
_SQRT_2 = math.sqrt(2.0)
_LN_2 = math.log(2.0)

_LANCZOS_COEFFICIENTS = (76.18009172947146, -86.50532032941677,
                         24.01409824083091, -1.231739572450155,
                         0.1208650973866179e-2, -0.5395239384953e-5)

# Search half-width around the approximate beta inverse
_BETA_INV_SEARCH_DELTA = 0.01

#===============================================================================
# Gamma and related functions
#===============================================================================

@apidoc
def log_gamma(x):
    """
    Natural log of the gamma function, via the Lanczos approximation.
    Arguments <= 1 are shifted up using Gamma(x+1) = x Gamma(x).
    
    :param x: Argument, must be > 0
    :type x:  `float`
    
    """
    if x <= 0.0:
        msg = "log_gamma() argument ({0}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, x)
    if x <= 1.0:
        return log_gamma(x + 1.0) - math.log(x)
    
    series = 1.000000000190015
    term = x
    for c in _LANCZOS_COEFFICIENTS:
        term += 1.0
        series += c / term
    temp = x + 5.5
    leading_factor = math.log(temp) * (x + 0.5) - temp
    return leading_factor + math.log(series * _SQRT_2PI / x)


@apidoc
def gamma(x):
    """
    The gamma function, for x > 0
    """
    return math.exp(log_gamma(x))


@apidoc
def digamma(x):
    """
    The digamma (psi) function, the derivative of log_gamma(), for x > 0.
    Uses the recurrence psi(x) = psi(x+1) - 1/x to shift the argument to
    at least 7, then an asymptotic expansion.
    """
    if x <= 0.0:
        msg = "digamma() argument ({0}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, x)
    result = 0.0
    while x < 7.0:
        result -= 1.0 / x
        x += 1.0
    x -= 0.5
    xx = 1.0 / x
    xx2 = xx * xx
    xx4 = xx2 * xx2
    result += (math.log(x) + xx2 / 24.0 - 7.0 / 960.0 * xx4
               + 31.0 / 8064.0 * xx4 * xx2 - 127.0 / 30720.0 * xx4 * xx4)
    return result


@apidoc
class LogFactorialTable(object):
    """
    Cache of log(n!) values for small n, plus a table of exact factorials
    up to 32!. Values are computed on demand. A default table is used by
    the module functions :func:`log_factorial`, :func:`factorial` and
    :func:`binomial_coefficient`; clients may create and pass their own.
    
    :param size: log(n!) is cached for n < size
    :type size:  `int`
    
    """
    MAX_EXACT_FACTORIAL = 32
    
    def __init__(self, size=101):
        self._size = size
        self._log_factorials = {}
        self._factorials = [1.0, 1.0]
        
    def reset(self):
        """
        Clear the cached values
        """
        self._log_factorials.clear()
        self._factorials = [1.0, 1.0]
        
    def log_factorial(self, n):
        _check_nonnegative_int(n, 'log_factorial')
        if n <= 1:
            return 0.0
        if n >= self._size:
            return log_gamma(n + 1.0)
        value = self._log_factorials.get(n)
        if value is None:
            value = log_gamma(n + 1.0)
            self._log_factorials[n] = value
        return value
    
    def factorial(self, n):
        _check_nonnegative_int(n, 'factorial')
        if n > LogFactorialTable.MAX_EXACT_FACTORIAL:
            return math.exp(log_gamma(n + 1.0))
        f = self._factorials
        while len(f) <= n:
            f.append(f[-1] * len(f))
        return f[n]
    
    def binomial_coefficient(self, n, k):
        _check_nonnegative_int(n, 'binomial_coefficient')
        if k < 0 or k > n:
            msg = "binomial_coefficient() k ({0}) must be in range 0 - n ({1})"
            raise SimDomainError(_DOMAIN_ERROR, msg, k, n)
        return math.floor(0.5 + math.exp(self.log_factorial(n)
                                         - self.log_factorial(k)
                                         - self.log_factorial(n - k)))

_default_table = LogFactorialTable()

def _check_nonnegative_int(n, fname):
    if n < 0 or int(n) != n:
        msg = "{0}() argument ({1}) must be a non-negative integer"
        raise SimDomainError(_DOMAIN_ERROR, msg, fname, n)

@apidoc
def log_factorial(n, table=None):
    """
    log(n!) for non-negative integer n, cached for small n
    """
    return (table or _default_table).log_factorial(n)

@apidoc
def factorial(n, table=None):
    """
    n! for non-negative integer n (as a float)
    """
    return (table or _default_table).factorial(n)

@apidoc
def binomial_coefficient(n, k, table=None):
    """
    The number of combinations of n things taken k at a time (as a float)
    """
    return (table or _default_table).binomial_coefficient(n, k)


def _incomplete_gamma_series(a, x, max_iterations, eps):
    ap = a
    term = 1.0 / a
    total = term
    for _ in range(max_iterations):
        ap += 1.0
        term *= x / ap
        total += term
        if abs(term) < abs(total) * eps:
            return total * math.exp(-x + a * math.log(x) - log_gamma(a))
    msg = "Incomplete gamma series for a={0}, x={1} did not converge in {2} iterations"
    raise SimConvergenceError(_CONVERGENCE_ERROR, msg, a, x, max_iterations)


def _incomplete_gamma_fraction(a, x, max_iterations, eps, environment):
    """
    The complement Q(a,x), via the continued fraction
    
        e^-x x^a / Gamma(a) * 1/(x+1-a - 1(1-a)/(x+3-a - 2(2-a)/(x+5-a - ...)))
    """
    b = x + 1.0 - a
    cf = ContinuedFraction(lambda n: (-n * (n - a), b + 2.0 * n),
                           initial_value=b, desired_precision=eps,
                           max_iterations=max_iterations,
                           environment=environment)
    result = cf.evaluate()
    if not result.converged:
        msg = "Incomplete gamma continued fraction for a={0}, x={1} did not converge: precision {2} after {3} iterations"
        raise SimConvergenceError(_CONVERGENCE_ERROR, msg, a, x,
                                  result.precision, result.iterations)
    return math.exp(-x + a * math.log(x) - log_gamma(a)) / result.value


def _incomplete_gamma_pair(a, x, max_iterations, environment):
    if a <= 0.0:
        msg = "Incomplete gamma shape argument ({0}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, a)
    if x < 0.0:
        msg = "Incomplete gamma argument x ({0}) must be >= 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, x)
    if x == 0.0:
        return 0.0, 1.0
    if max_iterations is None:
        max_iterations = simconfig.get_gamma_series_iterations()
    env = numenv.resolve(environment)
    eps = env.default_precision
    
    # The continued fraction converges poorly for x < a+1, and the series
    # slowly for x >= a+1
    if x < a + 1.0:
        p = _incomplete_gamma_series(a, x, max_iterations, eps)
        return p, 1.0 - p
    q = _incomplete_gamma_fraction(a, x, max_iterations, eps, env)
    return 1.0 - q, q


@apidoc
def incomplete_gamma(a, x, max_iterations=None, environment=None):
    """
    The regularized lower incomplete gamma function P(a, x), i.e. the CDF
    at x of a gamma distribution with shape a and scale 1.
    
    :param a:              Shape, must be > 0
    :type a:               `float`
    
    :param x:              Argument, must be >= 0
    :type x:               `float`
    
    :param max_iterations: Iteration limit for the series or continued
                           fraction. Defaults to the [Numerics]
                           GammaSeriesIterations setting.
    :type max_iterations:  `int` or None
    
    :param environment:    Numeric environment
    :type environment:     :class:`~.numenv.NumericEnvironment` or None
    
    :raises:               :class:`~.simexception.SimConvergenceError` if
                           the evaluation does not converge
    
    """
    return _incomplete_gamma_pair(a, x, max_iterations, environment)[0]


@apidoc
def incomplete_gamma_complement(a, x, max_iterations=None, environment=None):
    """
    The regularized upper incomplete gamma function Q(a, x) = 1 - P(a, x).
    Computed directly (not by subtraction) when x >= a+1.
    """
    return _incomplete_gamma_pair(a, x, max_iterations, environment)[1]


@apidoc
def inverse_chi_square(p, dof, log_gamma_half_dof=None, environment=None):
    """
    Percentage point (inverse CDF) of the chi-square distribution, via
    algorithm AS 91 (Best and Roberts, Appl. Statist. 1975, with the
    AS R85 changes). Falls back to bisection on the incomplete gamma
    function if the AS 91 Taylor series iteration does not converge.
    
    :param p:                  Probability, in [0,1]
    :type p:                   `float`
    
    :param dof:                Degrees of freedom, must be > 0
    :type dof:                 `float`
    
    :param log_gamma_half_dof: log_gamma(dof/2), if already available
    :type log_gamma_half_dof:  `float` or None
    
    """
    if p < 0.0 or p > 1.0:
        msg = "inverse_chi_square() probability ({0}) must be in [0,1]"
        raise SimDomainError(_DOMAIN_ERROR, msg, p)
    if dof <= 0.0:
        msg = "inverse_chi_square() degrees of freedom ({0}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, dof)
    if p == 0.0:
        return 0.0
    if p == 1.0:
        return math.inf
    
    g = log_gamma(dof / 2.0) if log_gamma_half_dof is None else log_gamma_half_dof
    e = 0.5e-6
    maxit = 500
    xx = 0.5 * dof
    c = xx - 1.0
    
    # Starting approximation
    if dof < -1.24 * math.log(p):
        # small chi-squared
        ch = (p * xx * math.exp(g + xx * _LN_2)) ** (1.0 / xx)
        if ch < e:
            return ch
    elif dof > 0.32:
        # Wilson and Hilferty estimate
        x = std_normal_inv_cdf(p)
        p1 = 0.222222 / dof
        ch = dof * (x * math.sqrt(p1) + 1.0 - p1) ** 3
        # p tending to 1
        if ch > 2.2 * dof + 6.0:
            ch = -2.0 * (math.log(1.0 - p) - c * math.log(0.5 * ch) + g)
    else:
        ch = 0.4
        a = math.log(1.0 - p)
        while True:
            q = ch
            p1 = 1.0 + ch * (4.67 + ch)
            p2 = ch * (6.73 + ch * (6.66 + ch))
            t = -0.5 + (4.67 + 2.0 * ch) / p1 - (6.73 + ch * (13.32 + 3.0 * ch)) / p2
            ch -= (1.0 - math.exp(a + g + 0.5 * ch + c * _LN_2) * p2 / p1) / t
            if abs(q / ch - 1.0) <= 0.01:
                break
            
    # Seven term Taylor series refinement
    for _ in range(maxit):
        if not ch > 0.0 or math.isinf(ch):
            break
        q = ch
        p1 = 0.5 * ch
        p2 = p - incomplete_gamma(xx, p1, environment=environment)
        t = p2 * math.exp(xx * _LN_2 + g + p1 - c * math.log(ch))
        b = t / ch
        a = 0.5 * t - b * c
        s1 = (210.0 + a * (140.0 + a * (105.0 + a * (84.0 + a * (70.0 + 60.0 * a))))) / 420.0
        s2 = (420.0 + a * (735.0 + a * (966.0 + a * (1141.0 + 1278.0 * a)))) / 2520.0
        s3 = (210.0 + a * (462.0 + a * (707.0 + 932.0 * a))) / 2520.0
        s4 = (252.0 + a * (672.0 + 1182.0 * a) + c * (294.0 + a * (889.0 + 1740.0 * a))) / 5040.0
        s5 = (84.0 + 2264.0 * a + c * (1175.0 + 606.0 * a)) / 2520.0
        s6 = (120.0 + c * (346.0 + 127.0 * c)) / 5040.0
        ch += t * (1.0 + 0.5 * t * s1 - b * c * (s1 - b * (s2 - b * (s3 - b * (s4 - b * (s5 - b * s6))))))
        if abs(q / ch - 1.0) <= e:
            return ch
        
    logger.debug("AS 91 did not converge for p=%g, dof=%g; using bisection", p, dof)
    return _inverse_chi_square_bisection(p, dof, environment)


def _inverse_chi_square_bisection(p, dof, environment):
    f = lambda x: incomplete_gamma(0.5 * dof, 0.5 * max(x, 0.0),
                                   environment=environment) - p
    interval = find_interval(f, (0.0, max(2.0 * dof, 1.0)))
    if interval is None:
        msg = "Unable to bracket the chi-square inverse for p={0}, dof={1}"
        raise SimConvergenceError(_CONVERGENCE_ERROR, msg, p, dof)
    lower, upper = max(interval[0], 0.0), interval[1]
    finder = BisectionRootFinder(f, lower, upper, environment=environment)
    result = finder.evaluate()
    if not result.converged:
        msg = "Unable to invert the chi-square CDF for p={0}, dof={1}"
        raise SimConvergenceError(_CONVERGENCE_ERROR, msg, p, dof)
    return result.root

#===============================================================================
# Beta and related functions
#===============================================================================

@apidoc
def log_beta(a, b):
    """
    Natural log of the beta function, for a, b > 0
    """
    if a <= 0.0 or b <= 0.0:
        msg = "log_beta() arguments ({0}, {1}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, a, b)
    return log_gamma(a) + log_gamma(b) - log_gamma(a + b)


@apidoc
def beta_function(a, b):
    """
    The beta function, for a, b > 0
    """
    return math.exp(log_beta(a, b))


def _incomplete_beta_fraction(x, a, b, environment):
    """
    Continued fraction 1 + d1/(1 + d2/(1 + ...)) for the incomplete beta
    function, where for n = 2m the term is x m (b-m) / ((a+2m-1)(a+2m)),
    and for n = 2m+1 it is -x (a+m)(a+b+m) / ((a+2m)(a+2m+1)).
    """
    def factors(n):
        m = n // 2
        if n % 2 == 0:
            f0 = x * m * (b - m) / ((a + 2.0 * m) * (a + 2.0 * m - 1.0))
        else:
            f0 = -x * (a + m) * (a + b + m) / ((a + 2.0 * m) * (a + 2.0 * m + 1.0))
        return f0, 1.0
    
    cf = ContinuedFraction(factors, initial_value=1.0,
                           max_iterations=simconfig.get_max_iterations(),
                           environment=environment)
    result = cf.evaluate()
    if not result.converged:
        msg = "Incomplete beta continued fraction for x={0}, a={1}, b={2} did not converge: precision {3}"
        raise SimConvergenceError(_CONVERGENCE_ERROR, msg, x, a, b,
                                  result.precision)
    return result.value


@apidoc
def regularized_incomplete_beta(x, a, b, log_beta_ab=None, environment=None):
    """
    The regularized incomplete beta function I_x(a, b), i.e. the CDF at x
    of the standard beta distribution with shape parameters a and b.
    
    :param x:           Argument; values outside of [0,1] are clamped
    :type x:            `float`
    
    :param a:           First shape parameter, must be > 0
    :type a:            `float`
    
    :param b:           Second shape parameter, must be > 0
    :type b:            `float`
    
    :param log_beta_ab: log_beta(a, b), if already available
    :type log_beta_ab:  `float` or None
    
    """
    if a <= 0.0 or b <= 0.0:
        msg = "Incomplete beta shape parameters ({0}, {1}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, a, b)
    if x <= 0.0:
        return 0.0
    if x >= 1.0:
        return 1.0
    if log_beta_ab is None:
        log_beta_ab = log_beta(a, b)
    
    bt = math.exp(-log_beta_ab + a * math.log(x) + b * math.log1p(-x))
    if x < (a + 1.0) / (a + b + 2.0):
        return bt / (_incomplete_beta_fraction(x, a, b, environment) * a)
    return 1.0 - bt / (_incomplete_beta_fraction(1.0 - x, b, a, environment) * b)


def _approximate_beta_inv_cdf(p, a, b, log_beta_ab):
    """
    Starting approximation for the beta inverse, from AS 109 (Applied
    Statistics, 1977, vol 26, no 1, pp 111-114).
    """
    r = math.sqrt(-math.log(p * p))
    y = r - (2.30753 + 0.27061 * r) / (1.0 + (0.99229 + 0.04481 * r) * r)
    if a > 1.0 and b > 1.0:
        r = (y * y - 3.0) / 6.0
        s = 1.0 / (a + a - 1.0)
        t = 1.0 / (b + b - 1.0)
        h = 2.0 / (s + t)
        w = y * math.sqrt(h + r) / h - (t - s) * (r + 5.0 / 6.0 - 2.0 / (3.0 * h))
        return a / (a + b * math.exp(w + w))
    r = b + b
    t = 1.0 / (9.0 * b)
    t = r * (1.0 - t + y * math.sqrt(t)) ** 3
    if t <= 0.0:
        return 1.0 - math.exp(math.log((1.0 - p) * b) + log_beta_ab) / b
    t = (4.0 * a + r - 2.0) / t
    if t <= 1.0:
        return math.exp((math.log(p * a) + log_beta_ab) / a)
    return 1.0 - 2.0 / (t + 1.0)


@apidoc
def std_beta_inv_cdf(p, a, b, log_beta_ab=None, environment=None):
    """
    Inverse CDF of the standard beta distribution. Starts from the AS 109
    approximation, brackets the root near it (falling back to [0,1]) and
    finishes by bisection.
    
    :param p: Probability, in [0,1]
    :type p:  `float`
    
    :param a: First shape parameter, must be > 0
    :type a:  `float`
    
    :param b: Second shape parameter, must be > 0
    :type b:  `float`
    
    :raises:  :class:`~.simexception.SimConvergenceError` if the bisection
              does not converge
    
    """
    if a <= 0.0 or b <= 0.0:
        msg = "Beta shape parameters ({0}, {1}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, a, b)
    if p < 0.0 or p > 1.0:
        msg = "Beta inverse CDF probability ({0}) must be in [0,1]"
        raise SimDomainError(_DOMAIN_ERROR, msg, p)
    env = numenv.resolve(environment)
    if env.equal(p, 1.0):
        return 1.0
    if env.equal(p, 0.0):
        return 0.0
    if log_beta_ab is None:
        log_beta_ab = log_beta(a, b)
        
    try:
        x0 = _approximate_beta_inv_cdf(p, a, b, log_beta_ab)
    except (ValueError, OverflowError):
        x0 = 0.5
    if not 0.0 <= x0 <= 1.0:
        x0 = 0.5
    
    f = lambda x: regularized_incomplete_beta(x, a, b, log_beta_ab, env) - p
    lower = max(0.0, x0 - _BETA_INV_SEARCH_DELTA)
    upper = min(1.0, x0 + _BETA_INV_SEARCH_DELTA)
    interval = find_interval(f, (lower, upper))
    if interval is None:
        lower, upper = 0.0, 1.0
    else:
        lower, upper = max(0.0, interval[0]), min(1.0, interval[1])
        
    finder = BisectionRootFinder(f, lower, upper, environment=env)
    result = finder.evaluate()
    if not result.converged:
        msg = "Unable to invert CDF for Beta(x, {0}, {1}) = {2}"
        raise SimConvergenceError(_CONVERGENCE_ERROR, msg, a, b, p)
    return result.root

#===============================================================================
# Normal distribution functions
#===============================================================================

_ACKLAM_A = (-3.969683028665376e+01, 2.209460984245205e+02,
             -2.759285104469687e+02, 1.383577518672690e+02,
             -3.066479806614716e+01, 2.506628277459239e+00)
_ACKLAM_B = (-5.447609879822406e+01, 1.615858368580409e+02,
             -1.556989798598866e+02, 6.680131188771972e+01,
             -1.328068155288572e+01)
_ACKLAM_C = (-7.784894002430293e-03, -3.223964580411365e-01,
             -2.400758277161838e+00, -2.549732539343734e+00,
             4.374664141464968e+00, 2.938163982698783e+00)
_ACKLAM_D = (7.784695709041462e-03, 3.224671290700398e-01,
             2.445134137142996e+00, 3.754408661907416e+00)
_ACKLAM_P_LOW = 0.02425
_ACKLAM_P_HIGH = 1.0 - _ACKLAM_P_LOW


@apidoc
def std_normal_cdf(z):
    """
    CDF of the standard normal distribution
    """
    return 0.5 * math.erfc(-z / _SQRT_2)


@apidoc
def std_normal_inv_cdf(p):
    """
    Inverse CDF of the standard normal distribution, via Peter Acklam's
    rational approximation (relative error below 1.15e-9). Returns -inf
    for p <= 0 and +inf for p >= 1.
    """
    if p <= 0.0:
        return -math.inf
    if p >= 1.0:
        return math.inf
    
    a, b, c, d = _ACKLAM_A, _ACKLAM_B, _ACKLAM_C, _ACKLAM_D
    if p < _ACKLAM_P_LOW:
        # lower tail
        q = math.sqrt(-2.0 * math.log(p))
        return ((((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]) /
                ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1.0))
    if p <= _ACKLAM_P_HIGH:
        # central region
        q = p - 0.5
        r = q * q
        return ((((((a[0] * r + a[1]) * r + a[2]) * r + a[3]) * r + a[4]) * r + a[5]) * q /
                (((((b[0] * r + b[1]) * r + b[2]) * r + b[3]) * r + b[4]) * r + 1.0))
    # upper tail
    q = math.sqrt(-2.0 * math.log1p(-p))
    return -((((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]) /
             ((((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1.0))

#===============================================================================
# Discrete distribution functions
#
# Each inverse CDF returns the smallest integer j for which CDF(j) >= u,
# starting from a Cornish-Fisher normal approximation and searching up or
# down the CDF from there.
#===============================================================================

def _cornish_fisher_start(u, mean, sigma, skewness):
    z = std_normal_inv_cdf(u)
    start = math.floor(mean + sigma * (z + skewness * (z * z - 1.0) / 6.0) + 0.5)
    return max(int(start), 0)


def _search_cdf(u, start, cdf_at_start, pmf, upper_limit=None):
    i = start
    cdf = cdf_at_start
    if u > cdf:
        while u > cdf:
            if upper_limit is not None and i >= upper_limit:
                return upper_limit
            i += 1
            p = pmf(i)
            cdf += p
            # accumulated rounding can leave the cdf just short of u
            if p == 0.0 and cdf > 0.5:
                return i
        return i
    while i > 0:
        cdf_below = cdf - pmf(i)
        if u > cdf_below:
            return i
        cdf = cdf_below
        i -= 1
    return 0


def _check_probability(u, fname):
    if u < 0.0 or u > 1.0:
        msg = "{0}() probability ({1}) must be in [0,1]"
        raise SimDomainError(_DOMAIN_ERROR, msg, fname, u)


@apidoc
def poisson_pmf(j, mean):
    """
    Poisson probability mass at integer j >= 0
    """
    if mean <= 0.0:
        msg = "Poisson mean ({0}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, mean)
    if j < 0:
        return 0.0
    return math.exp(j * math.log(mean) - mean - log_factorial(j))


@apidoc
def poisson_cdf(j, mean):
    """
    Poisson cumulative probability P(X <= j)
    """
    if mean <= 0.0:
        msg = "Poisson mean ({0}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, mean)
    if j < 0:
        return 0.0
    return incomplete_gamma_complement(j + 1.0, mean)


@apidoc
def poisson_inv_cdf(u, mean):
    """
    Poisson inverse CDF
    """
    _check_probability(u, 'poisson_inv_cdf')
    if mean <= 0.0:
        msg = "Poisson mean ({0}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, mean)
    if u <= 0.0:
        return 0
    if u >= 1.0:
        return math.inf
    sigma = math.sqrt(mean)
    start = _cornish_fisher_start(u, mean, sigma, 1.0 / sigma)
    return _search_cdf(u, start, poisson_cdf(start, mean),
                       lambda i: poisson_pmf(i, mean))


def _check_binomial(n, p):
    if n <= 0 or int(n) != n:
        msg = "Binomial number of trials ({0}) must be a positive integer"
        raise SimDomainError(_DOMAIN_ERROR, msg, n)
    if p <= 0.0 or p >= 1.0:
        msg = "Binomial success probability ({0}) must be in (0,1)"
        raise SimDomainError(_DOMAIN_ERROR, msg, p)


@apidoc
def binomial_pmf(j, n, p):
    """
    Binomial probability mass at integer j, for n trials with success
    probability p
    """
    _check_binomial(n, p)
    if j < 0 or j > n:
        return 0.0
    return math.exp(log_factorial(n) - log_factorial(j) - log_factorial(n - j)
                    + j * math.log(p) + (n - j) * math.log1p(-p))


@apidoc
def binomial_cdf(j, n, p):
    """
    Binomial cumulative probability P(X <= j)
    """
    _check_binomial(n, p)
    if j < 0:
        return 0.0
    if j >= n:
        return 1.0
    return regularized_incomplete_beta(1.0 - p, n - j, j + 1.0)


@apidoc
def binomial_inv_cdf(u, n, p):
    """
    Binomial inverse CDF
    """
    _check_probability(u, 'binomial_inv_cdf')
    _check_binomial(n, p)
    if u <= 0.0:
        return 0
    if u >= 1.0:
        return n
    mean = n * p
    sigma = math.sqrt(mean * (1.0 - p))
    start = min(_cornish_fisher_start(u, mean, sigma, (1.0 - 2.0 * p) / sigma), n)
    return _search_cdf(u, start, binomial_cdf(start, n, p),
                       lambda i: binomial_pmf(i, n, p), upper_limit=n)


def _check_neg_binomial(p, r):
    if r <= 0.0:
        msg = "Negative binomial number of successes ({0}) must be > 0"
        raise SimDomainError(_DOMAIN_ERROR, msg, r)
    if p <= 0.0 or p >= 1.0:
        msg = "Negative binomial success probability ({0}) must be in (0,1)"
        raise SimDomainError(_DOMAIN_ERROR, msg, p)


@apidoc
def neg_binomial_pmf(j, p, r):
    """
    Negative binomial probability of j failures before the r-th success
    """
    _check_neg_binomial(p, r)
    if j < 0:
        return 0.0
    return math.exp(log_gamma(r + j) - log_gamma(r) - log_factorial(j)
                    + r * math.log(p) + j * math.log1p(-p))


@apidoc
def neg_binomial_cdf(j, p, r):
    """
    Negative binomial cumulative probability P(X <= j)
    """
    _check_neg_binomial(p, r)
    if j < 0:
        return 0.0
    return regularized_incomplete_beta(p, r, j + 1.0)


@apidoc
def neg_binomial_inv_cdf(u, p, r, environment=None):
    """
    Negative binomial inverse CDF, on the range {0, 1, ...}. Reduces to the
    geometric inverse when r is 1.
    """
    _check_probability(u, 'neg_binomial_inv_cdf')
    _check_neg_binomial(p, r)
    if u <= 0.0:
        return 0
    if u >= 1.0:
        return math.inf
    if numenv.resolve(environment).equal(r, 1.0):
        return int(math.ceil(math.log1p(-u) / math.log1p(-p) - 1.0))
    mean = r * (1.0 - p) / p
    sigma = math.sqrt(mean / p)
    skewness = (2.0 - p) / math.sqrt(r * (1.0 - p))
    start = _cornish_fisher_start(u, mean, sigma, skewness)
    return _search_cdf(u, start, neg_binomial_cdf(start, p, r),
                       lambda i: neg_binomial_pmf(i, p, r))
