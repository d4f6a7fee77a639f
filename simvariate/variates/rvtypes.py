#===============================================================================
# MODULE rvtypes
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines a ParameterizedRandomVariable subclass for every DistributionKind.
#
# Each class validates its parameters in its constructor (raising a
# SimDomainError) and generates variates via the corresponding
# r_<kind>() function in the algorithms module. Parameter values are
# immutable; to change a parameter, change a ParameterSet (from
# get_parameters()) and create a new random variable from it.
#
# AR1NormalRV is the one stateful random variable; it models the lag-1
# autoregressive process
#
#     X(t) = mean + phi * (X(t-1) - mean) + e(t)
#
# where e(t) ~ Normal(0, variance * (1 - phi**2)), so that each X(t) is
# marginally Normal(mean, variance). X(0) is drawn from Normal(mean,
# variance).
#===============================================================================
__all__ = ['BernoulliRV', 'BetaRV', 'BinomialRV', 'ChiSquaredRV',
           'ConstantRV', 'DUniformRV', 'DEmpiricalRV', 'EmpiricalRV',
           'ExponentialRV', 'GammaRV', 'GeneralizedBetaRV', 'GeometricRV',
           'JohnsonBRV', 'LaplaceRV', 'LogLogisticRV', 'LognormalRV',
           'NegativeBinomialRV', 'NormalRV', 'PearsonType5RV',
           'PearsonType6RV', 'PoissonRV', 'ShiftedGeometricRV',
           'TriangularRV', 'UniformRV', 'WeibullRV', 'AR1NormalRV']

import math

from simvariate.core.simexception import SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc
from simvariate.numerics import specialfunctions as sf
from simvariate.variates import algorithms as alg
from simvariate.variates.algorithms import GammaAlgorithm
from simvariate.variates.parameters import DistributionKind
from simvariate.variates.rvariable import ParameterizedRandomVariable

logger = SimLogging.get_logger(__name__)

_RV_ERROR = "Random Variable Error"

#===============================================================================
# Discrete random variables
#===============================================================================

@apidoc
class BernoulliRV(ParameterizedRandomVariable):
    """
    Bernoulli random variable; generates 1.0 with probability
    ``prob_of_success``, otherwise 0.0
    """
    kind = DistributionKind.BERNOULLI
    _PARAMETERS = (('probOfSuccess', 'prob_of_success'),)
    
    def __init__(self, prob_of_success=0.5, stream=None, name=None):
        alg.validate_bernoulli(prob_of_success)
        super().__init__(stream, name)
        self._p = prob_of_success
        
    @property
    def prob_of_success(self):
        return self._p
    
    def _generate(self):
        return alg.r_bernoulli(self._p, self._stream)
    

@apidoc
class BinomialRV(ParameterizedRandomVariable):
    """
    Binomial random variable: the number of successes in ``num_trials``
    Bernoulli trials
    """
    kind = DistributionKind.BINOMIAL
    _PARAMETERS = (('probOfSuccess', 'prob_of_success'),
                   ('numTrials', 'num_trials'))
    
    def __init__(self, prob_of_success=0.5, num_trials=2, stream=None,
                 name=None):
        alg.validate_binomial(prob_of_success, num_trials)
        super().__init__(stream, name)
        self._p = prob_of_success
        self._n = int(num_trials)
        
    @property
    def prob_of_success(self):
        return self._p
    
    @property
    def num_trials(self):
        return self._n
    
    def _generate(self):
        return alg.r_binomial(self._p, self._n, self._stream)
    

@apidoc
class PoissonRV(ParameterizedRandomVariable):
    """
    Poisson random variable
    """
    kind = DistributionKind.POISSON
    _PARAMETERS = (('mean', 'mean'),)
    
    def __init__(self, mean=1.0, stream=None, name=None):
        alg.validate_poisson(mean)
        super().__init__(stream, name)
        self._mean = mean
        
    @property
    def mean(self):
        return self._mean
    
    def _generate(self):
        return alg.r_poisson(self._mean, self._stream)
    

@apidoc
class DUniformRV(ParameterizedRandomVariable):
    """
    Discrete uniform random variable over the integers
    [minimum, maximum]
    """
    kind = DistributionKind.DUNIFORM
    _PARAMETERS = (('min', 'minimum'), ('max', 'maximum'))
    
    def __init__(self, minimum=0, maximum=1, stream=None, name=None):
        alg.validate_duniform(minimum, maximum)
        super().__init__(stream, name)
        self._min = int(minimum)
        self._max = int(maximum)
        
    @property
    def minimum(self):
        return self._min
    
    @property
    def maximum(self):
        return self._max
    
    def _generate(self):
        return alg.r_duniform(self._min, self._max, self._stream)
    

@apidoc
class GeometricRV(ParameterizedRandomVariable):
    """
    Geometric random variable: the number of failures before the first
    success, on {0, 1, 2, ...}
    """
    kind = DistributionKind.GEOMETRIC
    _PARAMETERS = (('probOfSuccess', 'prob_of_success'),)
    
    def __init__(self, prob_of_success=0.5, stream=None, name=None):
        alg.validate_geometric(prob_of_success)
        super().__init__(stream, name)
        self._p = prob_of_success
        
    @property
    def prob_of_success(self):
        return self._p
    
    def _generate(self):
        return alg.r_geometric(self._p, self._stream)
    

@apidoc
class ShiftedGeometricRV(GeometricRV):
    """
    Shifted geometric random variable: the number of trials up to and
    including the first success, on {1, 2, ...}
    """
    kind = DistributionKind.SHIFTED_GEOMETRIC
    
    def _generate(self):
        return alg.r_shifted_geometric(self._p, self._stream)
    

@apidoc
class NegativeBinomialRV(ParameterizedRandomVariable):
    """
    Negative binomial random variable: the number of failures before the
    ``num_successes``-th success. ``num_successes`` need not be an integer.
    """
    kind = DistributionKind.NEGATIVE_BINOMIAL
    _PARAMETERS = (('probOfSuccess', 'prob_of_success'),
                   ('numSuccesses', 'num_successes'))
    
    def __init__(self, prob_of_success=0.5, num_successes=1.0, stream=None,
                 name=None):
        alg.validate_neg_binomial(prob_of_success, num_successes)
        super().__init__(stream, name)
        self._p = prob_of_success
        self._r = num_successes
        
    @property
    def prob_of_success(self):
        return self._p
    
    @property
    def num_successes(self):
        return self._r
    
    def _generate(self):
        return alg.r_neg_binomial(self._p, self._r, self._stream)
    

@apidoc
class DEmpiricalRV(ParameterizedRandomVariable):
    """
    Discrete empirical random variable: generates ``values[i]`` with
    probability ``cdf[i] - cdf[i-1]``.
    
    :param values: The values to be generated
    :type values:  Sequence of `float`
    
    :param cdf:    Cumulative probabilities, one per value. Must be
                   non-decreasing, in [0,1], and end with 1.0
    :type cdf:     Sequence of `float`
    
    """
    kind = DistributionKind.DEMPIRICAL
    _PARAMETERS = (('values', 'values'), ('cdf', 'cdf'))
    
    def __init__(self, values=(0.0, 1.0), cdf=(0.5, 1.0), stream=None,
                 name=None):
        alg.validate_dempirical(values, cdf)
        super().__init__(stream, name)
        self._values = tuple(values)
        self._cdf = tuple(cdf)
        
    @property
    def values(self):
        return list(self._values)
    
    @property
    def cdf(self):
        return list(self._cdf)
    
    def _generate(self):
        return alg.r_dempirical(self._values, self._cdf, self._stream)
    

@apidoc
class EmpiricalRV(ParameterizedRandomVariable):
    """
    Empirical random variable: generates values selected uniformly, with
    replacement, from a population (i.e., bootstrap sampling).
    """
    kind = DistributionKind.EMPIRICAL
    _PARAMETERS = (('population', 'population'),)
    
    def __init__(self, population=(0.0,), stream=None, name=None):
        alg.validate_empirical(population)
        super().__init__(stream, name)
        self._population = tuple(population)
        
    @property
    def population(self):
        return list(self._population)
    
    def _generate(self):
        return alg.r_empirical(self._population, self._stream)
    

@apidoc
class ConstantRV(ParameterizedRandomVariable):
    """
    A random variable that always generates the same value. Sampling does
    not draw from the stream.
    """
    kind = DistributionKind.CONSTANT
    _PARAMETERS = (('value', 'value'),)
    
    def __init__(self, value=1.0, stream=None, name=None):
        super().__init__(stream, name)
        self._value = value
        
    @property
    def value(self):
        return self._value
    
    def _generate(self):
        return alg.r_constant(self._value)
    
#===============================================================================
# Continuous random variables
#===============================================================================

@apidoc
class UniformRV(ParameterizedRandomVariable):
    """
    Continuous uniform random variable over [minimum, maximum]
    """
    kind = DistributionKind.UNIFORM
    _PARAMETERS = (('min', 'minimum'), ('max', 'maximum'))
    
    def __init__(self, minimum=0.0, maximum=1.0, stream=None, name=None):
        alg.validate_uniform(minimum, maximum)
        super().__init__(stream, name)
        self._min = minimum
        self._max = maximum
        
    @property
    def minimum(self):
        return self._min
    
    @property
    def maximum(self):
        return self._max
    
    def _generate(self):
        return alg.r_uniform(self._min, self._max, self._stream)
    

@apidoc
class NormalRV(ParameterizedRandomVariable):
    """
    Normal random variable, parameterized by mean and variance (not
    standard deviation)
    """
    kind = DistributionKind.NORMAL
    _PARAMETERS = (('mean', 'mean'), ('variance', 'variance'))
    
    def __init__(self, mean=0.0, variance=1.0, stream=None, name=None):
        alg.validate_normal(mean, variance)
        super().__init__(stream, name)
        self._mean = mean
        self._variance = variance
        
    @property
    def mean(self):
        return self._mean
    
    @property
    def variance(self):
        return self._variance
    
    def _generate(self):
        return alg.r_normal(self._mean, self._variance, self._stream)
    

@apidoc
class LognormalRV(ParameterizedRandomVariable):
    """
    Lognormal random variable, parameterized by its own mean and variance
    (rather than those of the underlying normal)
    """
    kind = DistributionKind.LOGNORMAL
    _PARAMETERS = (('mean', 'mean'), ('variance', 'variance'))
    
    def __init__(self, mean=1.0, variance=1.0, stream=None, name=None):
        alg.validate_lognormal(mean, variance)
        super().__init__(stream, name)
        self._mean = mean
        self._variance = variance
        
    @property
    def mean(self):
        return self._mean
    
    @property
    def variance(self):
        return self._variance
    
    def _generate(self):
        return alg.r_lognormal(self._mean, self._variance, self._stream)
    

@apidoc
class ExponentialRV(ParameterizedRandomVariable):
    """
    Exponential random variable, parameterized by its mean
    """
    kind = DistributionKind.EXPONENTIAL
    _PARAMETERS = (('mean', 'mean'),)
    
    def __init__(self, mean=1.0, stream=None, name=None):
        alg.validate_exponential(mean)
        super().__init__(stream, name)
        self._mean = mean
        
    @property
    def mean(self):
        return self._mean
    
    def _generate(self):
        return alg.r_exponential(self._mean, self._stream)
    

class _ShapeScaleRV(ParameterizedRandomVariable):
    """
    Base for the two-parameter (shape, scale) random variables
    """
    _PARAMETERS = (('shape', 'shape'), ('scale', 'scale'))
    
    def __init__(self, shape=1.0, scale=1.0, stream=None, name=None):
        alg.validate_shape_scale(shape, scale, self.kind.label)
        super().__init__(stream, name)
        self._shape = shape
        self._scale = scale
        
    @property
    def shape(self):
        return self._shape
    
    @property
    def scale(self):
        return self._scale
    

@apidoc
class WeibullRV(_ShapeScaleRV):
    """
    Weibull random variable
    """
    kind = DistributionKind.WEIBULL
    
    def _generate(self):
        return alg.r_weibull(self._shape, self._scale, self._stream)
    

@apidoc
class LogLogisticRV(_ShapeScaleRV):
    """
    Log-logistic random variable
    """
    kind = DistributionKind.LOGLOGISTIC
    
    def _generate(self):
        return alg.r_loglogistic(self._shape, self._scale, self._stream)
    

@apidoc
class PearsonType5RV(_ShapeScaleRV):
    """
    Pearson type V (inverted gamma) random variable
    """
    kind = DistributionKind.PEARSON_TYPE5
    
    def _generate(self):
        return alg.r_pearson_type5(self._shape, self._scale, self._stream)
    

@apidoc
class GammaRV(_ShapeScaleRV):
    """
    Gamma random variable. Variates are generated by inverse transform
    unless acceptance-rejection is requested; the algorithm is carried over
    to new instances.
    
    :param algorithm: The generation algorithm
    :type algorithm:  :class:`~.algorithms.GammaAlgorithm`
    
    """
    kind = DistributionKind.GAMMA
    
    def __init__(self, shape=1.0, scale=1.0, stream=None, name=None,
                 algorithm=GammaAlgorithm.INVERSE):
        super().__init__(shape, scale, stream, name)
        if not isinstance(algorithm, GammaAlgorithm):
            msg = "Invalid gamma generation algorithm: {0}"
            raise SimDomainError(_RV_ERROR, msg, algorithm)
        self._algorithm = algorithm
        
    @property
    def algorithm(self):
        return self._algorithm
    
    def _generate(self):
        return alg.r_gamma(self._shape, self._scale, self._stream,
                           self._algorithm)
    
    def with_parameters(self, pset, stream=None, name=None):
        rv = GammaRV.from_parameters(pset, stream, name)
        rv._algorithm = self._algorithm
        return rv
    

@apidoc
class TriangularRV(ParameterizedRandomVariable):
    """
    Triangular random variable
    """
    kind = DistributionKind.TRIANGULAR
    _PARAMETERS = (('min', 'minimum'), ('mode', 'mode'), ('max', 'maximum'))
    
    def __init__(self, minimum=0.0, mode=0.5, maximum=1.0, stream=None,
                 name=None):
        alg.validate_triangular(minimum, mode, maximum)
        super().__init__(stream, name)
        self._min = minimum
        self._mode = mode
        self._max = maximum
        
    @property
    def minimum(self):
        return self._min
    
    @property
    def mode(self):
        return self._mode
    
    @property
    def maximum(self):
        return self._max
    
    def _generate(self):
        return alg.r_triangular(self._min, self._mode, self._max,
                                self._stream)
    

@apidoc
class LaplaceRV(ParameterizedRandomVariable):
    """
    Laplace (double exponential) random variable
    """
    kind = DistributionKind.LAPLACE
    _PARAMETERS = (('mean', 'mean'), ('scale', 'scale'))
    
    def __init__(self, mean=0.0, scale=1.0, stream=None, name=None):
        alg.validate_laplace(mean, scale)
        super().__init__(stream, name)
        self._mean = mean
        self._scale = scale
        
    @property
    def mean(self):
        return self._mean
    
    @property
    def scale(self):
        return self._scale
    
    def _generate(self):
        return alg.r_laplace(self._mean, self._scale, self._stream)
    

@apidoc
class ChiSquaredRV(ParameterizedRandomVariable):
    """
    Chi-squared random variable
    """
    kind = DistributionKind.CHI_SQUARED
    _PARAMETERS = (('dof', 'dof'),)
    
    def __init__(self, dof=1.0, stream=None, name=None):
        alg.validate_chi_squared(dof)
        super().__init__(stream, name)
        self._dof = dof
        
    @property
    def dof(self):
        return self._dof
    
    def _generate(self):
        return alg.r_chi_squared(self._dof, self._stream)
    

@apidoc
class BetaRV(ParameterizedRandomVariable):
    """
    Beta random variable on [0,1]
    """
    kind = DistributionKind.BETA
    _PARAMETERS = (('alpha1', 'alpha1'), ('alpha2', 'alpha2'))
    
    def __init__(self, alpha1=1.0, alpha2=1.0, stream=None, name=None):
        alg.validate_beta(alpha1, alpha2)
        super().__init__(stream, name)
        self._alpha1 = alpha1
        self._alpha2 = alpha2
        
    @property
    def alpha1(self):
        return self._alpha1
    
    @property
    def alpha2(self):
        return self._alpha2
    
    def _generate(self):
        return alg.r_beta(self._alpha1, self._alpha2, self._stream)
    

@apidoc
class GeneralizedBetaRV(ParameterizedRandomVariable):
    """
    Beta random variable rescaled to [minimum, maximum]
    """
    kind = DistributionKind.GENERALIZED_BETA
    _PARAMETERS = (('alpha1', 'alpha1'), ('alpha2', 'alpha2'),
                   ('min', 'minimum'), ('max', 'maximum'))
    
    def __init__(self, alpha1=1.0, alpha2=1.0, minimum=0.0, maximum=1.0,
                 stream=None, name=None):
        alg.validate_generalized_beta(alpha1, alpha2, minimum, maximum)
        super().__init__(stream, name)
        self._alpha1 = alpha1
        self._alpha2 = alpha2
        self._min = minimum
        self._max = maximum
        
    @property
    def alpha1(self):
        return self._alpha1
    
    @property
    def alpha2(self):
        return self._alpha2
    
    @property
    def minimum(self):
        return self._min
    
    @property
    def maximum(self):
        return self._max
    
    def _generate(self):
        return alg.r_generalized_beta(self._alpha1, self._alpha2,
                                      self._min, self._max, self._stream)
    

@apidoc
class JohnsonBRV(ParameterizedRandomVariable):
    """
    Johnson B (bounded) random variable on (minimum, maximum)
    """
    kind = DistributionKind.JOHNSONB
    _PARAMETERS = (('alpha1', 'alpha1'), ('alpha2', 'alpha2'),
                   ('min', 'minimum'), ('max', 'maximum'))
    
    def __init__(self, alpha1=0.0, alpha2=1.0, minimum=0.0, maximum=1.0,
                 stream=None, name=None):
        alg.validate_johnsonb(alpha1, alpha2, minimum, maximum)
        super().__init__(stream, name)
        self._alpha1 = alpha1
        self._alpha2 = alpha2
        self._min = minimum
        self._max = maximum
        
    @property
    def alpha1(self):
        return self._alpha1
    
    @property
    def alpha2(self):
        return self._alpha2
    
    @property
    def minimum(self):
        return self._min
    
    @property
    def maximum(self):
        return self._max
    
    def _generate(self):
        return alg.r_johnsonb(self._alpha1, self._alpha2, self._min,
                              self._max, self._stream)
    

@apidoc
class PearsonType6RV(ParameterizedRandomVariable):
    """
    Pearson type VI random variable
    """
    kind = DistributionKind.PEARSON_TYPE6
    _PARAMETERS = (('alpha1', 'alpha1'), ('alpha2', 'alpha2'),
                   ('beta', 'beta'))
    
    def __init__(self, alpha1=2.0, alpha2=3.0, beta=1.0, stream=None,
                 name=None):
        alg.validate_pearson_type6(alpha1, alpha2, beta)
        super().__init__(stream, name)
        self._alpha1 = alpha1
        self._alpha2 = alpha2
        self._beta = beta
        
    @property
    def alpha1(self):
        return self._alpha1
    
    @property
    def alpha2(self):
        return self._alpha2
    
    @property
    def beta(self):
        return self._beta
    
    def _generate(self):
        return alg.r_pearson_type6(self._alpha1, self._alpha2, self._beta,
                                   self._stream)
    

@apidoc
class AR1NormalRV(ParameterizedRandomVariable):
    """
    Lag-1 autoregressive normal process. Successive variates have
    marginal distribution Normal(mean, variance) and lag-1 correlation
    ``correlation``.
    
    :param mean:        Process mean
    :type mean:         `float`
    
    :param variance:    Marginal variance, must be > 0
    :type variance:     `float`
    
    :param correlation: Lag-1 correlation, in [-1,1]
    :type correlation:  `float`
    
    """
    kind = DistributionKind.AR1NORMAL
    _PARAMETERS = (('mean', 'mean'), ('variance', 'variance'),
                   ('correlation', 'correlation'))
    
    def __init__(self, mean=0.0, variance=1.0, correlation=0.0, stream=None,
                 name=None):
        alg.validate_ar1_normal(mean, variance, correlation)
        super().__init__(stream, name)
        self._mean = mean
        self._variance = variance
        self._phi = correlation
        self._error_sd = math.sqrt(variance * (1.0 - correlation * correlation))
        self._x = None
        
    @property
    def mean(self):
        return self._mean
    
    @property
    def variance(self):
        return self._variance
    
    @property
    def correlation(self):
        return self._phi
    
    def _generate(self):
        z = sf.std_normal_inv_cdf(self._stream.next_uniform())
        if self._x is None:
            self._x = self._mean + z * math.sqrt(self._variance)
        else:
            self._x = (self._mean + self._phi * (self._x - self._mean)
                       + z * self._error_sd)
        return self._x
    
    def reset_process(self):
        """
        Restart the process; the next variate is drawn from the marginal
        distribution.
        """
        self._x = None
        
    def reset_start_stream(self):
        super().reset_start_stream()
        self.reset_process()
        
    def reset_start_substream(self):
        super().reset_start_substream()
        self.reset_process()
        
    def advance_to_next_substream(self):
        super().advance_to_next_substream()
        self.reset_process()
