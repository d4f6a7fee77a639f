#===============================================================================
# MODULE multivariate
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines multivariate random variables, which generate NumPy arrays
# rather than scalars:
#
# - MultivariateIndependentRV: independent marginal random variables, one
#   per coordinate, either on their own streams or sharing a single one.
# - BivariateNormalRV: correlated normal pair.
# - BivariateLognormalRV: correlated lognormal pair, via the bivariate
#   normal of the logs.
#===============================================================================
__all__ = ['MultivariateRandomVariable', 'MultivariateIndependentRV',
           'BivariateNormalRV', 'BivariateLognormalRV']

import math
import numpy as np

from simvariate.core.simexception import SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc
from simvariate.numerics import specialfunctions as sf
from simvariate.variates.rvariable import RandomVariable

logger = SimLogging.get_logger(__name__)

_MV_ERROR = "Invalid Multivariate Random Variable"


def _check_correlation(rho):
    if not -1.0 <= rho <= 1.0:
        msg = "Correlation ({0}) must be in [-1,1]"
        raise SimDomainError(_MV_ERROR, msg, rho)


@apidoc
class MultivariateRandomVariable(RandomVariable):
    """
    Base class for random variables that generate vectors (as NumPy
    arrays of length :attr:`dimension`). :meth:`sample_n` returns an
    n x dimension array.
    """
    def __init__(self, dimension, stream=None, name=None):
        super().__init__(stream, name)
        self._dimension = dimension
        self._previous_value = np.full(dimension, math.nan)
        
    @property
    def dimension(self):
        return self._dimension
    
    @property
    def previous_value(self):
        return self._previous_value.copy()
    
    def sample(self):
        value = self._generate()
        self._previous_value = value
        return value.copy()
    
    get_value = sample
    
    def sample_n(self, n):
        if n < 0:
            msg = "Sample size ({0}) must be non-negative"
            raise SimDomainError(_MV_ERROR, msg, n)
        result = np.empty((n, self._dimension))
        for i in range(n):
            result[i] = self.sample()
        return result
    

@apidoc
class MultivariateIndependentRV(MultivariateRandomVariable):
    """
    A vector of independent marginal random variables. 
    
    If ``share_stream`` is True, the vector is built from new instances of
    the marginals, all bound to a single stream (the passed stream, or a
    new independent stream). Otherwise the marginals are used as passed,
    each sampling from its own stream, and stream operations (reset,
    substream advance, antithetic) are applied to each of them.
    
    :param marginals:    One random variable per coordinate
    :type marginals:     Sequence of :class:`~.rvariable.RandomVariable`
    
    :param share_stream: If True, all coordinates share one stream
    :type share_stream:  `bool`
    
    """
    def __init__(self, marginals, share_stream=False, stream=None, name=None):
        if not marginals or not all(isinstance(rv, RandomVariable)
                                    for rv in marginals):
            msg = "Marginals ({0}) must be one or more RandomVariables"
            raise SimDomainError(_MV_ERROR, msg, marginals)
        if share_stream:
            super().__init__(len(marginals), stream, name)
            self._marginals = tuple(rv.new_instance(self._stream)
                                    for rv in marginals)
        else:
            if stream is None:
                stream = marginals[0].stream
            super().__init__(len(marginals), stream, name)
            self._marginals = tuple(marginals)
        self._share_stream = share_stream
        
    @property
    def marginals(self):
        return list(self._marginals)
    
    @property
    def share_stream(self):
        return self._share_stream
    
    def _generate(self):
        return np.array([rv.sample() for rv in self._marginals], dtype=float)
    
    def new_instance(self, stream=None):
        """
        Return a new instance. With a shared stream, the new instance
        shares the passed stream; otherwise each marginal is re-instanced
        on the passed stream or, if None, on a new independent stream.
        """
        if self._share_stream:
            return MultivariateIndependentRV(self._marginals, True, stream)
        return MultivariateIndependentRV(
            [rv.new_instance(stream) for rv in self._marginals])
    
    def new_antithetic_instance(self):
        if self._share_stream:
            return MultivariateIndependentRV(
                self._marginals, True, self._stream.new_antithetic_instance())
        return MultivariateIndependentRV(
            [rv.new_antithetic_instance() for rv in self._marginals])
    
    def _streams(self):
        if self._share_stream:
            return [self._stream]
        # marginals may (deliberately) share streams; visit each once
        streams = []
        for rv in self._marginals:
            if not any(rv.stream is s for s in streams):
                streams.append(rv.stream)
        return streams
    
    @property
    def antithetic(self):
        return self._marginals[0].antithetic
    
    @antithetic.setter
    def antithetic(self, flag):
        for s in self._streams():
            s.antithetic = flag
            
    def reset_start_stream(self):
        for s in self._streams():
            s.reset_start_stream()
            
    def reset_start_substream(self):
        for s in self._streams():
            s.reset_start_substream()
            
    def advance_to_next_substream(self):
        for s in self._streams():
            s.advance_to_next_substream()
            

@apidoc
class BivariateNormalRV(MultivariateRandomVariable):
    """
    Bivariate normal random variable. Each sample consumes two uniform
    deviates z0, z1 (as standard normals) and returns::
    
        x0 = mean1 + sqrt(var1) * z0
        x1 = mean2 + sqrt(var2) * (rho * z0 + sqrt(1 - rho**2) * z1)
    
    """
    def __init__(self, mean1=0.0, var1=1.0, mean2=0.0, var2=1.0, rho=0.0,
                 stream=None, name=None):
        if var1 <= 0.0 or var2 <= 0.0:
            msg = "Variances ({0}, {1}) must be > 0"
            raise SimDomainError(_MV_ERROR, msg, var1, var2)
        _check_correlation(rho)
        super().__init__(2, stream, name)
        self._mean1 = mean1
        self._var1 = var1
        self._mean2 = mean2
        self._var2 = var2
        self._rho = rho
        
    @property
    def mean1(self):
        return self._mean1
    
    @property
    def variance1(self):
        return self._var1
    
    @property
    def mean2(self):
        return self._mean2
    
    @property
    def variance2(self):
        return self._var2
    
    @property
    def correlation(self):
        return self._rho
    
    def _generate(self):
        z0 = sf.std_normal_inv_cdf(self._stream.next_uniform())
        z1 = sf.std_normal_inv_cdf(self._stream.next_uniform())
        s1 = math.sqrt(self._var1)
        s2 = math.sqrt(self._var2)
        x0 = self._mean1 + s1 * z0
        x1 = self._mean2 + s2 * (self._rho * z0
                                 + math.sqrt(1.0 - self._rho * self._rho) * z1)
        return np.array([x0, x1])
    
    def new_instance(self, stream=None):
        return BivariateNormalRV(self._mean1, self._var1, self._mean2,
                                 self._var2, self._rho, stream)
    

@apidoc
class BivariateLognormalRV(MultivariateRandomVariable):
    """
    Bivariate lognormal random variable, parameterized by the means,
    variances and correlation of the lognormal pair itself. Generated by
    exponentiating a :class:`BivariateNormalRV` whose parameters are
    derived from those values.
    """
    def __init__(self, mean1=1.0, var1=1.0, mean2=1.0, var2=1.0, rho=0.0,
                 stream=None, name=None):
        if mean1 <= 0.0 or mean2 <= 0.0:
            msg = "Means ({0}, {1}) must be > 0"
            raise SimDomainError(_MV_ERROR, msg, mean1, mean2)
        if var1 <= 0.0 or var2 <= 0.0:
            msg = "Variances ({0}, {1}) must be > 0"
            raise SimDomainError(_MV_ERROR, msg, var1, var2)
        _check_correlation(rho)
        
        nmean1 = math.log(mean1 * mean1 / math.sqrt(mean1 * mean1 + var1))
        nmean2 = math.log(mean2 * mean2 / math.sqrt(mean2 * mean2 + var2))
        nvar1 = math.log(1.0 + var1 / (mean1 * mean1))
        nvar2 = math.log(1.0 + var2 / (mean2 * mean2))
        r = 1.0 + rho * math.sqrt(var1 * var2) / (mean1 * mean2)
        nrho = math.log(r) / math.sqrt(nvar1 * nvar2) if r > 0.0 else -math.inf
        if not -1.0 <= nrho <= 1.0:
            msg = "Correlation {0} is not attainable for these means and variances"
            raise SimDomainError(_MV_ERROR, msg, rho)
        
        super().__init__(2, stream, name)
        self._bvn = BivariateNormalRV(nmean1, nvar1, nmean2, nvar2, nrho,
                                      self._stream)
        self._mean1 = mean1
        self._var1 = var1
        self._mean2 = mean2
        self._var2 = var2
        self._rho = rho
        
    @property
    def mean1(self):
        return self._mean1
    
    @property
    def variance1(self):
        return self._var1
    
    @property
    def mean2(self):
        return self._mean2
    
    @property
    def variance2(self):
        return self._var2
    
    @property
    def correlation(self):
        return self._rho
    
    def _generate(self):
        return np.exp(self._bvn.sample())
    
    def new_instance(self, stream=None):
        return BivariateLognormalRV(self._mean1, self._var1, self._mean2,
                                    self._var2, self._rho, stream)
