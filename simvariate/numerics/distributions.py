#===============================================================================
# MODULE distributions
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Lightweight, immutable continuous distribution objects providing pdf(),
# cdf(), inv_cdf(), domain(), mean() and variance(). These are what
# composite random variables (truncated, acceptance-rejection) need from a
# distribution; the variate algorithms themselves do not depend on them.
#===============================================================================
__all__ = ['ContinuousDistribution', 'NormalDistribution',
           'ExponentialDistribution', 'UniformDistribution',
           'TriangularDistribution', 'WeibullDistribution',
           'LognormalDistribution', 'LogLogisticDistribution',
           'LaplaceDistribution', 'GammaDistribution', 'BetaDistribution']

import math

from simvariate.core.simexception import SimDomainError
from simvariate.core.apidoc import apidoc, apidocskip
from simvariate.numerics import specialfunctions as sf

_ERROR_NAME = "Distribution Parameter Error"
_NAN = float('nan')
_SQRT_2PI = math.sqrt(2.0 * math.pi)


def _require(condition, msg, *args):
    if not condition:
        raise SimDomainError(_ERROR_NAME, msg, *args)


def _check_probability(p):
    _require(0.0 <= p <= 1.0, "Probability ({0}) must be in [0,1]", p)


@apidoc
class ContinuousDistribution(object):
    """
    Base class for continuous distributions. Subclasses implement
    :meth:`pdf`, :meth:`cdf`, :meth:`inv_cdf`, :meth:`domain`,
    :meth:`mean` and :meth:`variance`.
    """
    __slots__ = ()
    
    def pdf(self, x):
        raise NotImplementedError()
    
    def cdf(self, x):
        raise NotImplementedError()
    
    def inv_cdf(self, p):
        raise NotImplementedError()
    
    def domain(self):
        """
        Return the (lower, upper) limits of the distribution's support;
        either may be infinite.
        """
        raise NotImplementedError()
    
    def mean(self):
        raise NotImplementedError()
    
    def variance(self):
        raise NotImplementedError()
    
    def parameters(self):
        """
        Return the distribution parameters as a dictionary
        """
        return {name.lstrip('_'): getattr(self, name) for name in self.__slots__}
    
    def __eq__(self, other):
        return type(self) is type(other) and self.parameters() == other.parameters()
    
    def __hash__(self):
        return hash((type(self).__name__, tuple(self.parameters().items())))
    
    def __repr__(self):
        args = ', '.join('{0}={1}'.format(k, v) for k, v in self.parameters().items())
        return '{0}({1})'.format(type(self).__name__, args)


@apidoc
class NormalDistribution(ContinuousDistribution):
    """
    Normal distribution, parameterized by mean and variance (> 0)
    """
    __slots__ = ('_mean', '_variance')
    
    def __init__(self, mean=0.0, variance=1.0):
        _require(variance > 0.0, "Normal variance ({0}) must be > 0", variance)
        self._mean = mean
        self._variance = variance
        
    def pdf(self, x):
        sd = math.sqrt(self._variance)
        z = (x - self._mean) / sd
        return math.exp(-0.5 * z * z) / (sd * _SQRT_2PI)
    
    def cdf(self, x):
        return sf.std_normal_cdf((x - self._mean) / math.sqrt(self._variance))
    
    def inv_cdf(self, p):
        _check_probability(p)
        return self._mean + math.sqrt(self._variance) * sf.std_normal_inv_cdf(p)
    
    def domain(self):
        return -math.inf, math.inf
    
    def mean(self):
        return self._mean
    
    def variance(self):
        return self._variance
    

@apidoc
class ExponentialDistribution(ContinuousDistribution):
    """
    Exponential distribution, parameterized by its mean (> 0)
    """
    __slots__ = ('_mean',)
    
    def __init__(self, mean=1.0):
        _require(mean > 0.0, "Exponential mean ({0}) must be > 0", mean)
        self._mean = mean
        
    def pdf(self, x):
        return math.exp(-x / self._mean) / self._mean if x >= 0.0 else 0.0
    
    def cdf(self, x):
        return -math.expm1(-x / self._mean) if x > 0.0 else 0.0
    
    def inv_cdf(self, p):
        _check_probability(p)
        if p >= 1.0:
            return math.inf
        return -self._mean * math.log1p(-p)
    
    def domain(self):
        return 0.0, math.inf
    
    def mean(self):
        return self._mean
    
    def variance(self):
        return self._mean * self._mean
    

@apidoc
class UniformDistribution(ContinuousDistribution):
    """
    Continuous uniform distribution on [minimum, maximum]
    """
    __slots__ = ('_minimum', '_maximum')
    
    def __init__(self, minimum=0.0, maximum=1.0):
        _require(minimum < maximum,
                 "Uniform minimum ({0}) must be less than maximum ({1})",
                 minimum, maximum)
        self._minimum = minimum
        self._maximum = maximum
        
    def pdf(self, x):
        if self._minimum <= x <= self._maximum:
            return 1.0 / (self._maximum - self._minimum)
        return 0.0
        
    def cdf(self, x):
        if x <= self._minimum:
            return 0.0
        if x >= self._maximum:
            return 1.0
        return (x - self._minimum) / (self._maximum - self._minimum)
    
    def inv_cdf(self, p):
        _check_probability(p)
        return self._minimum + (self._maximum - self._minimum) * p
    
    def domain(self):
        return self._minimum, self._maximum
    
    def mean(self):
        return (self._minimum + self._maximum) / 2.0
    
    def variance(self):
        r = self._maximum - self._minimum
        return r * r / 12.0
    

@apidoc
class TriangularDistribution(ContinuousDistribution):
    """
    Triangular distribution on [minimum, maximum] with the given mode
    """
    __slots__ = ('_minimum', '_mode', '_maximum')
    
    def __init__(self, minimum=0.0, mode=0.5, maximum=1.0):
        _require(minimum < maximum,
                 "Triangular minimum ({0}) must be less than maximum ({1})",
                 minimum, maximum)
        _require(minimum <= mode <= maximum,
                 "Triangular mode ({0}) must be in [{1}, {2}]",
                 mode, minimum, maximum)
        self._minimum = minimum
        self._mode = mode
        self._maximum = maximum
        
    def pdf(self, x):
        a, c, b = self._minimum, self._mode, self._maximum
        if x < a or x > b:
            return 0.0
        if x < c:
            return 2.0 * (x - a) / ((b - a) * (c - a))
        if x == c:
            return 2.0 / (b - a)
        return 2.0 * (b - x) / ((b - a) * (b - c))
    
    def cdf(self, x):
        a, c, b = self._minimum, self._mode, self._maximum
        if x <= a:
            return 0.0
        if x >= b:
            return 1.0
        if x <= c:
            return (x - a) * (x - a) / ((b - a) * (c - a))
        return 1.0 - (b - x) * (b - x) / ((b - a) * (b - c))
    
    def inv_cdf(self, p):
        _check_probability(p)
        a, c, b = self._minimum, self._mode, self._maximum
        r = b - a
        cp = (c - a) / r
        if p < cp:
            return a + math.sqrt(p * r * (c - a))
        return b - math.sqrt((1.0 - p) * r * (b - c))
    
    def domain(self):
        return self._minimum, self._maximum
    
    def mean(self):
        return (self._minimum + self._mode + self._maximum) / 3.0
    
    def variance(self):
        a, c, b = self._minimum, self._mode, self._maximum
        return (a * a + b * b + c * c - a * b - a * c - b * c) / 18.0
    

@apidoc
class WeibullDistribution(ContinuousDistribution):
    """
    Weibull distribution with shape and scale (both > 0)
    """
    __slots__ = ('_shape', '_scale')
    
    def __init__(self, shape=1.0, scale=1.0):
        _require(shape > 0.0, "Weibull shape ({0}) must be > 0", shape)
        _require(scale > 0.0, "Weibull scale ({0}) must be > 0", scale)
        self._shape = shape
        self._scale = scale
        
    def pdf(self, x):
        if x < 0.0:
            return 0.0
        k, lam = self._shape, self._scale
        if x == 0.0:
            return 1.0 / lam if k == 1.0 else (math.inf if k < 1.0 else 0.0)
        return (k / lam) * (x / lam) ** (k - 1.0) * math.exp(-(x / lam) ** k)
        
    def cdf(self, x):
        if x <= 0.0:
            return 0.0
        return -math.expm1(-(x / self._scale) ** self._shape)
    
    def inv_cdf(self, p):
        _check_probability(p)
        if p >= 1.0:
            return math.inf
        return self._scale * (-math.log1p(-p)) ** (1.0 / self._shape)
    
    def domain(self):
        return 0.0, math.inf
    
    def mean(self):
        return self._scale * sf.gamma(1.0 + 1.0 / self._shape)
    
    def variance(self):
        g1 = sf.gamma(1.0 + 1.0 / self._shape)
        g2 = sf.gamma(1.0 + 2.0 / self._shape)
        return self._scale * self._scale * (g2 - g1 * g1)
    

@apidoc
class LognormalDistribution(ContinuousDistribution):
    """
    Lognormal distribution, parameterized by the mean (> 0) and variance
    (> 0) of the lognormal random variable itself (not of its log).
    """
    __slots__ = ('_mean', '_variance')
    
    def __init__(self, mean=1.0, variance=1.0):
        _require(mean > 0.0, "Lognormal mean ({0}) must be > 0", mean)
        _require(variance > 0.0, "Lognormal variance ({0}) must be > 0", variance)
        self._mean = mean
        self._variance = variance
        
    def _normal_parameters(self):
        d = self._variance + self._mean * self._mean
        mu = math.log(self._mean * self._mean / math.sqrt(d))
        sigma = math.sqrt(math.log(d / (self._mean * self._mean)))
        return mu, sigma
        
    def pdf(self, x):
        if x <= 0.0:
            return 0.0
        mu, sigma = self._normal_parameters()
        z = (math.log(x) - mu) / sigma
        return math.exp(-0.5 * z * z) / (x * sigma * _SQRT_2PI)
    
    def cdf(self, x):
        if x <= 0.0:
            return 0.0
        mu, sigma = self._normal_parameters()
        return sf.std_normal_cdf((math.log(x) - mu) / sigma)
    
    def inv_cdf(self, p):
        _check_probability(p)
        mu, sigma = self._normal_parameters()
        return math.exp(mu + sigma * sf.std_normal_inv_cdf(p))
    
    def domain(self):
        return 0.0, math.inf
    
    def mean(self):
        return self._mean
    
    def variance(self):
        return self._variance
    

@apidoc
class LogLogisticDistribution(ContinuousDistribution):
    """
    Log-logistic distribution with shape and scale (both > 0)
    """
    __slots__ = ('_shape', '_scale')
    
    def __init__(self, shape=1.0, scale=1.0):
        _require(shape > 0.0, "LogLogistic shape ({0}) must be > 0", shape)
        _require(scale > 0.0, "LogLogistic scale ({0}) must be > 0", scale)
        self._shape = shape
        self._scale = scale
        
    def pdf(self, x):
        if x <= 0.0:
            return 0.0
        b, a = self._shape, self._scale
        t = (x / a) ** b
        return (b / a) * (x / a) ** (b - 1.0) / ((1.0 + t) * (1.0 + t))
    
    def cdf(self, x):
        if x <= 0.0:
            return 0.0
        return 1.0 / (1.0 + (x / self._scale) ** -self._shape)
    
    def inv_cdf(self, p):
        _check_probability(p)
        if p >= 1.0:
            return math.inf
        return self._scale * (p / (1.0 - p)) ** (1.0 / self._shape)
    
    def domain(self):
        return 0.0, math.inf
    
    def mean(self):
        if self._shape <= 1.0:
            return _NAN
        theta = math.pi / self._shape
        return self._scale * theta / math.sin(theta)
    
    def variance(self):
        if self._shape <= 2.0:
            return _NAN
        theta = math.pi / self._shape
        s = math.sin(theta)
        return self._scale ** 2 * (2.0 * theta / math.sin(2.0 * theta) - theta * theta / (s * s))
    

@apidoc
class LaplaceDistribution(ContinuousDistribution):
    """
    Laplace (double exponential) distribution with location (mean) and
    scale (> 0)
    """
    __slots__ = ('_mean', '_scale')
    
    def __init__(self, mean=0.0, scale=1.0):
        _require(scale > 0.0, "Laplace scale ({0}) must be > 0", scale)
        self._mean = mean
        self._scale = scale
        
    def pdf(self, x):
        return math.exp(-abs(x - self._mean) / self._scale) / (2.0 * self._scale)
    
    def cdf(self, x):
        if x <= self._mean:
            return 0.5 * math.exp((x - self._mean) / self._scale)
        return 1.0 - 0.5 * math.exp(-(x - self._mean) / self._scale)
    
    def inv_cdf(self, p):
        _check_probability(p)
        if p <= 0.0:
            return -math.inf
        if p >= 1.0:
            return math.inf
        u = p - 0.5
        return self._mean - self._scale * math.copysign(1.0, u) * math.log1p(-2.0 * abs(u))
    
    def domain(self):
        return -math.inf, math.inf
    
    def mean(self):
        return self._mean
    
    def variance(self):
        return 2.0 * self._scale * self._scale
    

@apidoc
class GammaDistribution(ContinuousDistribution):
    """
    Gamma distribution with shape and scale (both > 0). The inverse CDF
    is obtained through the chi-square inverse.
    """
    __slots__ = ('_shape', '_scale')
    
    def __init__(self, shape=1.0, scale=1.0):
        _require(shape > 0.0, "Gamma shape ({0}) must be > 0", shape)
        _require(scale > 0.0, "Gamma scale ({0}) must be > 0", scale)
        self._shape = shape
        self._scale = scale
        
    def pdf(self, x):
        if x <= 0.0:
            return 0.0
        a, s = self._shape, self._scale
        return math.exp((a - 1.0) * math.log(x / s) - x / s - sf.log_gamma(a)) / s
    
    def cdf(self, x):
        if x <= 0.0:
            return 0.0
        return sf.incomplete_gamma(self._shape, x / self._scale)
    
    def inv_cdf(self, p):
        _check_probability(p)
        if p >= 1.0:
            return math.inf
        if self._shape == 1.0:
            return -self._scale * math.log1p(-p)
        return self._scale * sf.inverse_chi_square(p, 2.0 * self._shape) / 2.0
    
    def domain(self):
        return 0.0, math.inf
    
    def mean(self):
        return self._shape * self._scale
    
    def variance(self):
        return self._shape * self._scale * self._scale
    

@apidoc
class BetaDistribution(ContinuousDistribution):
    """
    Standard beta distribution on [0,1] with shape parameters alpha1 and
    alpha2 (both > 0)
    """
    __slots__ = ('_alpha1', '_alpha2')
    
    def __init__(self, alpha1=1.0, alpha2=1.0):
        _require(alpha1 > 0.0, "Beta alpha1 ({0}) must be > 0", alpha1)
        _require(alpha2 > 0.0, "Beta alpha2 ({0}) must be > 0", alpha2)
        self._alpha1 = alpha1
        self._alpha2 = alpha2
        
    def pdf(self, x):
        if x <= 0.0 or x >= 1.0:
            return 0.0
        a, b = self._alpha1, self._alpha2
        return math.exp((a - 1.0) * math.log(x) + (b - 1.0) * math.log1p(-x)
                        - sf.log_beta(a, b))
    
    def cdf(self, x):
        return sf.regularized_incomplete_beta(x, self._alpha1, self._alpha2)
    
    def inv_cdf(self, p):
        return sf.std_beta_inv_cdf(p, self._alpha1, self._alpha2)
    
    def domain(self):
        return 0.0, 1.0
    
    def mean(self):
        return self._alpha1 / (self._alpha1 + self._alpha2)
    
    def variance(self):
        a, b = self._alpha1, self._alpha2
        return a * b / ((a + b) ** 2 * (a + b + 1.0))
