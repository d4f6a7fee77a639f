#===============================================================================
# MODULE composite
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines random variables composed from distributions or other random
# variables:
#
# - TruncatedRV: a continuous distribution truncated to an interval,
#   generated by inverse transform over the rescaled CDF range.
# - ShiftedRV: another random variable plus a non-negative constant.
# - MixtureRV: a random selection (by a CDF table) among component
#   random variables.
# - AcceptanceRejectionRV: candidates from a proposal random variable,
#   accepted with probability given by a target/proposal density ratio.
#
# Component random variables keep their own streams; the stream bound to a
# MixtureRV or AcceptanceRejectionRV is used only for the selection or
# acceptance deviates.
#===============================================================================
__all__ = ['TruncatedRV', 'ShiftedRV', 'MixtureRV', 'AcceptanceRejectionRV']

import math

from simvariate.core.simexception import SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc
from simvariate.core import numenv
from simvariate.numerics.distributions import ContinuousDistribution
from simvariate.variates import algorithms as alg
from simvariate.variates.rvariable import RandomVariable

logger = SimLogging.get_logger(__name__)

_COMPOSITE_ERROR = "Invalid Composite Random Variable"


@apidoc
class TruncatedRV(RandomVariable):
    """
    A continuous distribution truncated to the interval
    [trunc_ll, trunc_ul]. Variates are generated as
    ``inv_cdf(F(trunc_ll) + (F(trunc_ul) - F(trunc_ll)) * u)``, so that
    every variate falls within the truncation interval.
    
    :param distribution: The distribution to truncate
    :type distribution:  :class:`~.distributions.ContinuousDistribution`
    
    :param cdf_ll:       Lower limit of the distribution's support; None
                         for the lower limit of its domain
    :type cdf_ll:        `float`
    
    :param cdf_ul:       Upper limit of the distribution's support; None
                         for the upper limit of its domain
    :type cdf_ul:        `float`
    
    :param trunc_ll:     Lower truncation limit, >= cdf_ll
    :type trunc_ll:      `float`
    
    :param trunc_ul:     Upper truncation limit, <= cdf_ul and > trunc_ll
    :type trunc_ul:      `float`
    
    """
    def __init__(self, distribution, cdf_ll, cdf_ul, trunc_ll, trunc_ul,
                 stream=None, name=None):
        if not isinstance(distribution, ContinuousDistribution):
            msg = "Truncated distribution ({0}) is not a ContinuousDistribution"
            raise SimDomainError(_COMPOSITE_ERROR, msg, distribution)
        domain_ll, domain_ul = distribution.domain()
        cdf_ll = domain_ll if cdf_ll is None else cdf_ll
        cdf_ul = domain_ul if cdf_ul is None else cdf_ul
        if trunc_ll >= trunc_ul:
            msg = "Lower truncation limit ({0}) must be less than upper limit ({1})"
            raise SimDomainError(_COMPOSITE_ERROR, msg, trunc_ll, trunc_ul)
        if cdf_ll >= cdf_ul:
            msg = "Lower support limit ({0}) must be less than upper limit ({1})"
            raise SimDomainError(_COMPOSITE_ERROR, msg, cdf_ll, cdf_ul)
        if trunc_ll < cdf_ll:
            msg = "Lower truncation limit ({0}) is below the support ({1})"
            raise SimDomainError(_COMPOSITE_ERROR, msg, trunc_ll, cdf_ll)
        if trunc_ul > cdf_ul:
            msg = "Upper truncation limit ({0}) is above the support ({1})"
            raise SimDomainError(_COMPOSITE_ERROR, msg, trunc_ul, cdf_ul)
        if trunc_ll == cdf_ll and trunc_ul == cdf_ul:
            msg = "Truncation limits [{0}, {1}] equal the support; no truncation"
            raise SimDomainError(_COMPOSITE_ERROR, msg, trunc_ll, trunc_ul)
        
        fll = distribution.cdf(trunc_ll) if trunc_ll > cdf_ll else 0.0
        ful = distribution.cdf(trunc_ul) if trunc_ul < cdf_ul else 1.0
        delta = ful - fll
        if not delta > 0.0 or numenv.default_environment().equal(delta, 0.0):
            msg = "The truncated interval [{0}, {1}] has (numerically) zero probability"
            raise SimDomainError(_COMPOSITE_ERROR, msg, trunc_ll, trunc_ul)
        
        super().__init__(stream, name)
        self._distribution = distribution
        self._cdf_ll = cdf_ll
        self._cdf_ul = cdf_ul
        self._trunc_ll = trunc_ll
        self._trunc_ul = trunc_ul
        self._fll = fll
        self._ful = ful
        self._delta = delta
        
    @property
    def distribution(self):
        return self._distribution
    
    @property
    def lower_limit(self):
        return self._trunc_ll
    
    @property
    def upper_limit(self):
        return self._trunc_ul
    
    @property
    def cdf_range(self):
        """
        The (F(trunc_ll), F(trunc_ul)) pair
        """
        return self._fll, self._ful
    
    def _generate(self):
        v = self._fll + self._delta * self._stream.next_uniform()
        x = self._distribution.inv_cdf(v)
        # guard against round-off in the inverse at the limits
        return min(max(x, self._trunc_ll), self._trunc_ul)
    
    def new_instance(self, stream=None):
        return TruncatedRV(self._distribution, self._cdf_ll, self._cdf_ul,
                           self._trunc_ll, self._trunc_ul, stream)
    

@apidoc
class ShiftedRV(RandomVariable):
    """
    A random variable shifted by a non-negative constant. The shifted
    random variable is bound to (and shares) the stream of the random
    variable it wraps.
    
    :param shift: The constant added to each variate, >= 0
    :type shift:  `float`
    
    :param rv:    The random variable to shift
    :type rv:     :class:`~.rvariable.RandomVariable`
    
    """
    def __init__(self, shift, rv, name=None):
        if shift < 0.0:
            msg = "Shift ({0}) must be >= 0"
            raise SimDomainError(_COMPOSITE_ERROR, msg, shift)
        if not isinstance(rv, RandomVariable):
            msg = "Shifted random variable ({0}) is not a RandomVariable"
            raise SimDomainError(_COMPOSITE_ERROR, msg, rv)
        super().__init__(rv.stream, name)
        self._shift = shift
        self._rv = rv
        
    @property
    def shift(self):
        return self._shift
    
    @property
    def random_variable(self):
        return self._rv
    
    def _generate(self):
        return self._shift + self._rv.sample()
    
    def new_instance(self, stream=None):
        return ShiftedRV(self._shift, self._rv.new_instance(stream))
    
    def new_antithetic_instance(self):
        return ShiftedRV(self._shift, self._rv.new_antithetic_instance())
    

@apidoc
class MixtureRV(RandomVariable):
    """
    A mixture of random variables: each variate is sampled from component
    ``i`` with probability ``cdf[i] - cdf[i-1]``. The component is
    selected using this random variable's stream; the selected component
    then samples from its own stream.
    
    :param rvs: The component random variables
    :type rvs:  Sequence of :class:`~.rvariable.RandomVariable`
    
    :param cdf: Cumulative selection probabilities, one per component
    :type cdf:  Sequence of `float`
    
    """
    def __init__(self, rvs, cdf, stream=None, name=None):
        if not rvs or not all(isinstance(rv, RandomVariable) for rv in rvs):
            msg = "Mixture components ({0}) must be one or more RandomVariables"
            raise SimDomainError(_COMPOSITE_ERROR, msg, rvs)
        alg.validate_dempirical(rvs, cdf)
        super().__init__(stream, name)
        self._rvs = tuple(rvs)
        self._cdf = tuple(cdf)
        
    @property
    def components(self):
        return list(self._rvs)
    
    @property
    def cdf(self):
        return list(self._cdf)
    
    def _generate(self):
        rv = alg.randomly_select(self._rvs, self._cdf, self._stream)
        return rv.sample()
    
    def new_instance(self, stream=None):
        """
        Return a new mixture whose components are new instances of this
        mixture's components. The selection stream and every component
        are bound to the passed stream (or, if None, each to a new
        independent stream).
        """
        return MixtureRV([rv.new_instance(stream) for rv in self._rvs],
                         self._cdf, stream)
    
    def new_antithetic_instance(self):
        rvs = [rv.new_antithetic_instance() for rv in self._rvs]
        return MixtureRV(rvs, self._cdf, self._stream.new_antithetic_instance())
    

@apidoc
class AcceptanceRejectionRV(RandomVariable):
    """
    Generates variates from a target density f by acceptance-rejection
    against a proposal random variable with density g, where
    ``f(x) <= c * g(x)`` for all x. Candidates x are drawn from the
    proposal and accepted if ``u <= density_ratio(x)``, where
    ``density_ratio(x) = f(x) / (c * g(x))``.
    
    The loop is capped at the configured rejection soft cap, as a guard
    against a density ratio that is (numerically) zero everywhere.
    
    :param proposal:      The proposal random variable
    :type proposal:       :class:`~.rvariable.RandomVariable`
    
    :param density_ratio: Function returning f(x) / (c * g(x)), in [0,1]
    :type density_ratio:  callable
    
    """
    def __init__(self, proposal, density_ratio, stream=None, name=None):
        if not isinstance(proposal, RandomVariable):
            msg = "Proposal ({0}) is not a RandomVariable"
            raise SimDomainError(_COMPOSITE_ERROR, msg, proposal)
        if not callable(density_ratio):
            msg = "Density ratio ({0}) is not callable"
            raise SimDomainError(_COMPOSITE_ERROR, msg, density_ratio)
        super().__init__(stream, name)
        self._proposal = proposal
        self._ratio = density_ratio
        self._candidates = 0
        
    @property
    def proposal(self):
        return self._proposal
    
    @property
    def candidates_generated(self):
        """
        The total number of candidates drawn from the proposal
        """
        return self._candidates
    
    def _generate(self):
        cap = alg.rejection_soft_cap()
        for _ in range(cap):
            x = self._proposal.sample()
            self._candidates += 1
            r = self._ratio(x)
            if r > 1.0 or r < 0.0 or math.isnan(r):
                msg = "Density ratio at {0} ({1}) is not in [0,1]"
                raise SimDomainError(_COMPOSITE_ERROR, msg, x, r)
            if self._stream.next_uniform() <= r:
                return x
        alg.rejection_cap_exceeded(self._name, cap)
        
    def new_instance(self, stream=None):
        return AcceptanceRejectionRV(self._proposal.new_instance(stream),
                                     self._ratio, stream)
    
    def new_antithetic_instance(self):
        return AcceptanceRejectionRV(self._proposal.new_antithetic_instance(),
                                     self._ratio,
                                     self._stream.new_antithetic_instance())
