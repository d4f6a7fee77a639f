#===============================================================================
# MODULE rvariable
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines the RandomVariable base class and its ParameterizedRandomVariable
# subclass.
#
# A RandomVariable is bound to exactly one uniform stream, which it never
# owns: several random variables may deliberately share a stream (to induce
# dependence between them), and a random variable never clones or replaces
# its stream implicitly. Sharing a stream between threads requires external
# synchronization.
#
# Subclasses implement _generate(), which draws one variate from the bound
# stream, and new_instance(). ParameterizedRandomVariable subclasses are
# described by a DistributionKind and a ParameterSet; they declare a
# _PARAMETERS tuple of (exported parameter name, attribute name) pairs,
# which drives both get_parameters() and from_parameters().
#===============================================================================
__all__ = ['RandomVariable', 'ParameterizedRandomVariable']

import math
import itertools
import numpy as np

from simvariate.core.simexception import SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc
from simvariate.core import simrandom
from simvariate.variates.parameters import ParameterSet

logger = SimLogging.get_logger(__name__)

_RV_ERROR = "Random Variable Error"

_id_counter = itertools.count(1)


@apidoc
class RandomVariable(object):
    """
    Base class for all random variables. A random variable generates
    variates from a single bound uniform stream.
    
    :param stream: The uniform stream to draw from. If None, a new
                   independent stream is obtained from the current run's
                   stream provider.
    :type stream:  :class:`~.simrandom.RNStream` or any object with the
                   same uniform stream interface
                   
    :param name:   Optional name; defaults to the class name suffixed with
                   the numeric id
    :type name:    `str`
    
    """
    def __init__(self, stream=None, name=None):
        self._id = next(_id_counter)
        self._stream = simrandom.next_stream() if stream is None else stream
        self._name = name if name else '{0}_{1}'.format(type(self).__name__,
                                                        self._id)
        self._previous_value = math.nan
        
    @property
    def id(self):
        """
        The random variable's process-wide unique numeric id
        """
        return self._id
    
    @property
    def name(self):
        return self._name
    
    @property
    def stream(self):
        """
        The bound uniform stream
        """
        return self._stream
    
    @property
    def previous_value(self):
        """
        The value returned by the most recent call to :meth:`sample`, or
        NaN if the random variable has not been sampled.
        """
        return self._previous_value
    
    def sample(self):
        """
        Generate, record and return the next variate.
        
        :return: The next variate
        :rtype:  `float`
        
        """
        value = self._generate()
        self._previous_value = value
        return value
    
    get_value = sample
    
    def sample_n(self, n):
        """
        Return a NumPy array of the next n variates
        """
        if n < 0:
            msg = "Sample size ({0}) must be non-negative"
            raise SimDomainError(_RV_ERROR, msg, n)
        return np.array([self.sample() for _ in range(n)], dtype=float)
    
    def __iter__(self):
        while True:
            yield self.sample()
    
    def _generate(self):
        raise NotImplementedError()
    
    def new_instance(self, stream=None):
        """
        Return a new random variable with the same distribution, bound to
        the passed stream or (if None) a new independent stream.
        """
        raise NotImplementedError()
    
    def new_antithetic_instance(self):
        """
        Return a new random variable with the same distribution, bound to
        the antithetic counterpart of this random variable's stream.
        """
        return self.new_instance(self._stream.new_antithetic_instance())
    
    @property
    def antithetic(self):
        """
        The antithetic option of the bound stream
        """
        return self._stream.antithetic
    
    @antithetic.setter
    def antithetic(self, flag):
        self._stream.antithetic = flag
    
    def reset_start_stream(self):
        self._stream.reset_start_stream()
        
    def reset_start_substream(self):
        self._stream.reset_start_substream()
        
    def advance_to_next_substream(self):
        self._stream.advance_to_next_substream()
        
    def __repr__(self):
        return '{0}({1})'.format(type(self).__name__, self._name)
    

@apidoc
class ParameterizedRandomVariable(RandomVariable):
    """
    A random variable whose distribution is described by a
    :class:`~.parameters.DistributionKind` and a
    :class:`~.parameters.ParameterSet`. Only parameterized random variables
    participate in runtime reconfiguration via a
    :class:`~.parametersetter.ParameterSetter`.
    """
    kind = None
    _PARAMETERS = ()
    
    def get_parameters(self):
        """
        Return a new :class:`~.parameters.ParameterSet` holding this random
        variable's current parameter values. The returned set is a snapshot;
        changing it does not affect the random variable.
        """
        pset = ParameterSet(self.kind)
        for pname, attr in self._PARAMETERS:
            pset.set_value(pname, getattr(self, attr))
        return pset
    
    @classmethod
    def from_parameters(cls, pset, stream=None, name=None):
        """
        Create a random variable of this class from a parameter set of the
        matching kind.
        """
        if pset.kind is not cls.kind:
            msg = "Parameter set kind ({0}) does not match {1}"
            raise SimDomainError(_RV_ERROR, msg, pset.kind, cls.__name__)
        kwargs = {attr: pset.get_value(pname) for pname, attr in cls._PARAMETERS}
        return cls(stream=stream, name=name, **kwargs)
    
    def with_parameters(self, pset, stream=None, name=None):
        """
        Create a random variable like this one (carrying over any
        generation options that are not parameters) from a parameter set.
        """
        return type(self).from_parameters(pset, stream, name)

    def new_instance(self, stream=None):
        return self.with_parameters(self.get_parameters(), stream)

    def __repr__(self):
        args = ', '.join('{0}={1}'.format(attr, getattr(self, attr))
                         for _, attr in self._PARAMETERS)
        return '{0}({1})'.format(type(self).__name__, args)
