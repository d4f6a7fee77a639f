#===============================================================================
# MODULE algorithms
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines the variate generation algorithms: one r_<kind>() function per
# distribution kind, each of which validates its parameters, draws one or
# more uniform deviates from a stream and returns a variate. Also defines
# the discrete selection utilities (CDF/PMF validation, random selection,
# permutation and sampling without replacement).
#
# Most distributions are generated by inverse transform - a single uniform
# deviate u is passed through the inverse CDF. That keeps common random
# numbers and antithetic variates effective, since each variate is a
# monotone function of one deviate. The exceptions:
#
# - Gamma may optionally be generated by acceptance-rejection (Ahrens-Dieter
#   GS for shape < 1, Marsaglia-Tsang for shape > 1), which is much faster
#   than inverting the gamma CDF.
# - PearsonType5 and PearsonType6 are transformations of gamma and beta
#   variates.
#
# Acceptance-rejection loops terminate with probability one; as insurance
# against pathological floating point behavior, each is capped at the
# [Variates] RejectionSoftCap configuration setting. Reaching the cap is
# logged and raises a SimConvergenceError.
#
# Every function takes an optional stream (any object implementing the
# uniform stream contract described in simrandom); if omitted, the default
# stream for the current run is used.
#===============================================================================
import math
from enum import Enum

from simvariate.core.simexception import SimDomainError, SimConvergenceError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc, apidocskip
from simvariate.core import simrandom
import simvariate.core.configuration as simconfig
from simvariate.numerics import specialfunctions as sf

logger = SimLogging.get_logger(__name__)

_RAND_PARAMETER_ERROR = "Invalid Pseudo-Random Distribution Parameter(s)"
_REJECTION_ERROR = "Acceptance-Rejection Limit Exceeded"

_rejection_soft_cap = None


@apidoc
class GammaAlgorithm(Enum):
    """
    Gamma variate generation algorithm
    
    * INVERSE: inverse transform via the chi-square inverse
    * ACCEPTANCE_REJECTION: Ahrens-Dieter (shape < 1) or Marsaglia-Tsang
      (shape > 1)
    """
    INVERSE = 'Inverse'
    ACCEPTANCE_REJECTION = 'AcceptanceRejection'


def rejection_soft_cap():
    """
    The maximum number of iterations of an acceptance-rejection loop,
    from the [Variates] RejectionSoftCap configuration setting.
    """
    global _rejection_soft_cap
    if _rejection_soft_cap is None:
        _rejection_soft_cap = simconfig.get_rejection_soft_cap()
    return _rejection_soft_cap


def rejection_cap_exceeded(description, cap):
    """
    Log and raise when an acceptance-rejection loop reaches its cap.
    """
    msg = "{0}: no candidate accepted in {1} iterations"
    logger.error("%s: no candidate accepted in %d iterations", description, cap)
    raise SimConvergenceError(_REJECTION_ERROR, msg, description, cap)


def _stream(stream):
    return simrandom.default_stream() if stream is None else stream


def _require(condition, msg, *args):
    if not condition:
        raise SimDomainError(_RAND_PARAMETER_ERROR, msg, *args)

#===============================================================================
# Parameter validation
#
# Used both by the r_<kind>() functions and, eagerly, by random variable
# constructors.
#===============================================================================

def _check_probability_open(p, name='Success probability'):
    _require(0.0 < p < 1.0, "{0} ({1}) must be in (0,1)", name, p)

def _check_positive(value, name):
    _require(value > 0.0, "{0} ({1}) must be > 0", name, value)

def _check_range(minimum, maximum):
    _require(minimum < maximum,
             "Lower limit ({0}) must be less than upper limit ({1})",
             minimum, maximum)

def _check_integer(value, name):
    _require(int(value) == value, "{0} ({1}) must be an integer", name, value)

def validate_bernoulli(p):
    _check_probability_open(p)

def validate_binomial(p, n):
    _check_probability_open(p)
    _check_integer(n, 'Number of trials')
    _require(n >= 1, "Number of trials ({0}) must be >= 1", n)

def validate_poisson(mean):
    _check_positive(mean, 'Poisson mean')

def validate_duniform(minimum, maximum):
    _check_integer(minimum, 'Discrete uniform minimum')
    _check_integer(maximum, 'Discrete uniform maximum')
    _require(minimum <= maximum,
             "Lower limit ({0}) must be <= upper limit ({1})", minimum, maximum)

def validate_geometric(p):
    _check_probability_open(p)

def validate_neg_binomial(p, r):
    _check_probability_open(p)
    _check_positive(r, 'Number of successes')

def validate_uniform(minimum, maximum):
    _check_range(minimum, maximum)

def validate_normal(mean, variance):
    _check_positive(variance, 'Normal variance')

def validate_lognormal(mean, variance):
    _check_positive(mean, 'Lognormal mean')
    _check_positive(variance, 'Lognormal variance')

def validate_shape_scale(shape, scale, kind):
    _check_positive(shape, kind + ' shape')
    _check_positive(scale, kind + ' scale')

def validate_exponential(mean):
    _check_positive(mean, 'Exponential mean')

def validate_johnsonb(alpha1, alpha2, minimum, maximum):
    _check_positive(alpha2, 'JohnsonB alpha2')
    _check_range(minimum, maximum)

def validate_triangular(minimum, mode, maximum):
    _check_range(minimum, maximum)
    _require(minimum <= mode <= maximum,
             "Mode ({0}) must be in [{1}, {2}]", mode, minimum, maximum)

def validate_chi_squared(dof):
    _check_positive(dof, 'Degrees of freedom')

def validate_beta(alpha1, alpha2):
    _check_positive(alpha1, 'Beta alpha1')
    _check_positive(alpha2, 'Beta alpha2')

def validate_generalized_beta(alpha1, alpha2, minimum, maximum):
    validate_beta(alpha1, alpha2)
    _check_range(minimum, maximum)

def validate_pearson_type6(alpha1, alpha2, beta):
    validate_beta(alpha1, alpha2)
    _check_positive(beta, 'PearsonType6 beta')

def validate_laplace(mean, scale):
    _check_positive(scale, 'Laplace scale')

def validate_ar1_normal(mean, variance, correlation):
    _check_positive(variance, 'AR1 variance')
    _require(-1.0 <= correlation <= 1.0,
             "AR1 correlation ({0}) must be in [-1,1]", correlation)

def validate_empirical(population):
    _require(population is not None and len(population) > 0,
             "The empirical population must contain at least one value")

def validate_dempirical(values, cdf):
    _require(values is not None and cdf is not None,
             "Both the values and the cdf must be supplied")
    _require(is_valid_cdf(cdf), "The supplied cdf ({0}) is not valid", list(cdf))
    _require(len(values) == len(cdf),
             "The values ({0}) and cdf ({1}) do not have the same length",
             len(values), len(cdf))

#===============================================================================
# Discrete selection utilities
#===============================================================================

@apidoc
def is_valid_cdf(cdf):
    """
    Returns True if the sequence is a valid cumulative distribution: all
    entries in [0,1], non-decreasing, and the last entry exactly 1.0
    """
    if cdf is None or len(cdf) == 0:
        return False
    if cdf[-1] != 1.0:
        return False
    previous = 0.0
    for value in cdf:
        if value < 0.0 or value > 1.0 or value < previous:
            return False
        previous = value
    return True

@apidoc
def is_valid_pmf(prob):
    """
    Returns True if the sequence has at least two elements, each in
    (0,1), summing to no more than 1.0
    """
    if prob is None or len(prob) < 2:
        return False
    total = 0.0
    for p in prob:
        if p <= 0.0 or p >= 1.0:
            return False
        total += p
        if total > 1.0:
            return False
    return True

@apidoc
def make_cdf(prob):
    """
    Return the cumulative distribution (a list) corresponding to a
    probability mass function. The last entry is set to exactly 1.0.
    """
    if not is_valid_pmf(prob):
        msg = "The supplied probabilities ({0}) are not a valid PMF"
        raise SimDomainError(_RAND_PARAMETER_ERROR, msg, list(prob))
    cdf = []
    total = 0.0
    for p in prob[:-1]:
        total += p
        cdf.append(total)
    cdf.append(1.0)
    return cdf

@apidoc
def randomly_select(values, cdf=None, stream=None):
    """
    Randomly select one of a sequence of values. If a cdf is supplied,
    value i is selected with probability cdf[i] - cdf[i-1]; otherwise the
    values are equally likely.
    
    :param values: Values to select from
    :type values:  Sequence
    
    :param cdf:    Cumulative probabilities corresponding to the values
    :type cdf:     Sequence of `float` or None
    
    :param stream: Uniform stream
    
    """
    stream = _stream(stream)
    if values is None or len(values) == 0:
        msg = "Cannot select from an empty sequence"
        raise SimDomainError(_RAND_PARAMETER_ERROR, msg)
    if cdf is None:
        if len(values) == 1:
            return values[0]
        return values[stream.rand_int(0, len(values) - 1)]
    
    validate_dempirical(values, cdf)
    if len(cdf) == 1:
        return values[0]
    u = stream.next_uniform()
    i = 0
    while cdf[i] <= u:
        i += 1
    return values[i]

@apidoc
def sample_without_replacement(seq, sample_size, stream=None):
    """
    Rearrange a mutable sequence in place so that its first
    ``sample_size`` elements are a random sample without replacement.
    Returns the sample as a list.
    """
    stream = _stream(stream)
    if sample_size > len(seq):
        msg = "Cannot draw {0} values without replacement from {1} elements"
        raise SimDomainError(_RAND_PARAMETER_ERROR, msg, sample_size, len(seq))
    last = len(seq) - 1
    for j in range(sample_size):
        i = stream.rand_int(j, last)
        seq[j], seq[i] = seq[i], seq[j]
    return list(seq[:sample_size])

@apidoc
def permute(seq, stream=None):
    """
    Randomly permute a mutable sequence in place, and return it.
    """
    sample_without_replacement(seq, len(seq), stream)
    return seq

#===============================================================================
# Discrete distributions
#===============================================================================

@apidoc
def r_bernoulli(p, stream=None):
    """
    Bernoulli variate: 1 with probability p, otherwise 0
    """
    validate_bernoulli(p)
    return 1.0 if _stream(stream).next_uniform() <= p else 0.0

@apidoc
def r_binomial(p, n, stream=None):
    """
    Number of successes in n trials with success probability p
    """
    validate_binomial(p, n)
    return sf.binomial_inv_cdf(_stream(stream).next_uniform(), int(n), p)

@apidoc
def r_poisson(mean, stream=None):
    """
    Poisson variate
    """
    validate_poisson(mean)
    return sf.poisson_inv_cdf(_stream(stream).next_uniform(), mean)

@apidoc
def r_duniform(minimum, maximum, stream=None):
    """
    Integer uniformly distributed over [minimum, maximum]
    """
    validate_duniform(minimum, maximum)
    return _stream(stream).rand_int(int(minimum), int(maximum))

@apidoc
def r_geometric(p, stream=None):
    """
    Number of failures before the first success, on {0, 1, ...}
    """
    validate_geometric(p)
    u = _stream(stream).next_uniform()
    return int(math.ceil(math.log1p(-u) / math.log1p(-p) - 1.0))

@apidoc
def r_shifted_geometric(p, stream=None):
    """
    Number of trials until the first success, on {1, 2, ...}
    """
    return 1 + r_geometric(p, stream)

@apidoc
def r_neg_binomial(p, r, stream=None):
    """
    Number of failures before the r-th success, on {0, 1, ...}
    """
    validate_neg_binomial(p, r)
    return sf.neg_binomial_inv_cdf(_stream(stream).next_uniform(), p, r)

@apidoc
def r_dempirical(values, cdf, stream=None):
    """
    Discrete empirical variate: values[i] with probability
    cdf[i] - cdf[i-1]
    """
    return randomly_select(values, cdf, stream)

@apidoc
def r_empirical(population, stream=None):
    """
    Value selected uniformly (i.e. bootstrapped) from a population
    """
    validate_empirical(population)
    return randomly_select(population, None, stream)

@apidoc
def r_constant(value, stream=None):
    """
    The constant value; no deviate is drawn.
    """
    return value

#===============================================================================
# Continuous distributions
#===============================================================================

@apidoc
def r_uniform(minimum=0.0, maximum=1.0, stream=None):
    """
    Continuous uniform variate on [minimum, maximum]
    """
    validate_uniform(minimum, maximum)
    return minimum + (maximum - minimum) * _stream(stream).next_uniform()

@apidoc
def r_normal(mean=0.0, variance=1.0, stream=None):
    """
    Normal variate with the specified mean and variance
    """
    validate_normal(mean, variance)
    z = sf.std_normal_inv_cdf(_stream(stream).next_uniform())
    return z * math.sqrt(variance) + mean

@apidoc
def r_lognormal(mean, variance, stream=None):
    """
    Lognormal variate whose mean and variance (not those of its log) are
    as specified
    """
    validate_lognormal(mean, variance)
    d = variance + mean * mean
    mu = math.log(mean * mean / math.sqrt(d))
    sigma = math.sqrt(math.log(d / (mean * mean)))
    z = sf.std_normal_inv_cdf(_stream(stream).next_uniform())
    return math.exp(mu + sigma * z)

@apidoc
def r_weibull(shape, scale, stream=None):
    """
    Weibull variate
    """
    validate_shape_scale(shape, scale, 'Weibull')
    u = _stream(stream).next_uniform()
    return scale * (-math.log1p(-u)) ** (1.0 / shape)

@apidoc
def r_exponential(mean, stream=None):
    """
    Exponential variate with the specified mean
    """
    validate_exponential(mean)
    return -mean * math.log1p(-_stream(stream).next_uniform())

@apidoc
def r_johnsonb(alpha1, alpha2, minimum, maximum, stream=None):
    """
    Johnson B (bounded) variate on (minimum, maximum)
    """
    validate_johnsonb(alpha1, alpha2, minimum, maximum)
    z = sf.std_normal_inv_cdf(_stream(stream).next_uniform())
    y = math.exp((z - alpha1) / alpha2)
    return (minimum + maximum * y) / (y + 1.0)

@apidoc
def r_loglogistic(shape, scale, stream=None):
    """
    Log-logistic variate
    """
    validate_shape_scale(shape, scale, 'LogLogistic')
    u = _stream(stream).next_uniform()
    return scale * (u / (1.0 - u)) ** (1.0 / shape)

@apidoc
def r_triangular(minimum, mode, maximum, stream=None):
    """
    Triangular variate; the inverse is piecewise, keyed on where the mode
    falls within the range.
    """
    validate_triangular(minimum, mode, maximum)
    p = _stream(stream).next_uniform()
    r = maximum - minimum
    c = (mode - minimum) / r
    if c == 0.0:
        x = 1.0 - math.sqrt(1.0 - p)
    elif c == 1.0:
        x = math.sqrt(p)
    elif p < c:
        x = math.sqrt(c * p)
    else:
        x = 1.0 - math.sqrt((1.0 - c) * (1.0 - p))
    return minimum + r * x

@apidoc
def r_laplace(mean, scale, stream=None):
    """
    Laplace variate
    """
    validate_laplace(mean, scale)
    u = _stream(stream).next_uniform() - 0.5
    return mean - scale * math.copysign(1.0, u) * math.log1p(-2.0 * abs(u))

@apidoc
def r_gamma(shape, scale, stream=None, algorithm=GammaAlgorithm.INVERSE):
    """
    Gamma variate. A shape of one is generated as an exponential,
    regardless of algorithm.
    
    :param shape:     Shape, must be > 0
    :type shape:      `float`
    
    :param scale:     Scale, must be > 0
    :type scale:      `float`
    
    :param stream:    Uniform stream
    
    :param algorithm: Generation algorithm
    :type algorithm:  :class:`GammaAlgorithm`
    
    """
    validate_shape_scale(shape, scale, 'Gamma')
    stream = _stream(stream)
    if shape == 1.0:
        return -scale * math.log1p(-stream.next_uniform())
    if algorithm == GammaAlgorithm.ACCEPTANCE_REJECTION:
        if shape < 1.0:
            return _gamma_ahrens_dieter(shape, scale, stream)
        return _gamma_marsaglia_tsang(shape, scale, stream)
    if algorithm != GammaAlgorithm.INVERSE:
        msg = "Invalid gamma generation algorithm: {0}"
        raise SimDomainError(_RAND_PARAMETER_ERROR, msg, algorithm)
    p = stream.next_uniform()
    return scale * sf.inverse_chi_square(p, 2.0 * shape, sf.log_gamma(shape)) / 2.0


def _gamma_ahrens_dieter(shape, scale, stream):
    """
    Algorithm GS (Ahrens and Dieter, 1974) for 0 < shape < 1
    """
    b = (math.e + shape) / math.e
    cap = rejection_soft_cap()
    for _ in range(cap):
        p = b * stream.next_uniform()
        u2 = stream.next_uniform()
        if p > 1.0:
            y = -math.log((b - p) / shape)
            if u2 <= y ** (shape - 1.0):
                return scale * y
        else:
            y = p ** (1.0 / shape)
            if u2 <= math.exp(-y):
                return scale * y
    rejection_cap_exceeded("Gamma (Ahrens-Dieter) shape={0}".format(shape), cap)


def _gamma_marsaglia_tsang(shape, scale, stream):
    """
    Marsaglia and Tsang (2000) for shape > 1, with the squeeze test
    u < 1 - 0.0331 x**4 ahead of the log test.
    """
    d = shape - 1.0 / 3.0
    c = 1.0 / math.sqrt(9.0 * d)
    cap = rejection_soft_cap()
    for _ in range(cap):
        while True:
            x = sf.std_normal_inv_cdf(stream.next_uniform())
            v = 1.0 + c * x
            if v > 0.0:
                break
        v = v * v * v
        u = stream.next_uniform()
        x2 = x * x
        if u < 1.0 - 0.0331 * x2 * x2:
            return d * v * scale
        if math.log(u) < 0.5 * x2 + d * (1.0 - v + math.log(v)):
            return d * v * scale
    rejection_cap_exceeded("Gamma (Marsaglia-Tsang) shape={0}".format(shape), cap)

@apidoc
def r_chi_squared(dof, stream=None):
    """
    Chi-square variate
    """
    validate_chi_squared(dof)
    return sf.inverse_chi_square(_stream(stream).next_uniform(), dof)

@apidoc
def r_beta(alpha1, alpha2, stream=None):
    """
    Standard beta variate on [0,1], via the beta inverse CDF
    """
    validate_beta(alpha1, alpha2)
    return sf.std_beta_inv_cdf(_stream(stream).next_uniform(), alpha1, alpha2)

@apidoc
def r_generalized_beta(alpha1, alpha2, minimum, maximum, stream=None):
    """
    Beta variate rescaled to [minimum, maximum]
    """
    validate_generalized_beta(alpha1, alpha2, minimum, maximum)
    x = sf.std_beta_inv_cdf(_stream(stream).next_uniform(), alpha1, alpha2)
    return minimum + (maximum - minimum) * x

@apidoc
def r_pearson_type5(shape, scale, stream=None):
    """
    Pearson type V (inverted gamma) variate: the reciprocal of a gamma
    variate with the same shape and reciprocal scale
    """
    validate_shape_scale(shape, scale, 'PearsonType5')
    return 1.0 / r_gamma(shape, 1.0 / scale, stream)

@apidoc
def r_pearson_type6(alpha1, alpha2, beta, stream=None):
    """
    Pearson type VI variate, beta * X / (1 - X) for X ~ Beta(alpha1, alpha2)
    """
    validate_pearson_type6(alpha1, alpha2, beta)
    fib = sf.std_beta_inv_cdf(_stream(stream).next_uniform(), alpha1, alpha2)
    if fib >= 1.0:
        return math.inf
    return beta * fib / (1.0 - fib)
