#===============================================================================
# MODULE factory
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Factory functions for creating parameter sets (with default values) and
# random variables, by distribution kind.
#===============================================================================
__all__ = ['random_variable_kinds', 'create_parameters', 'create_rvariable',
           'create_rvariable_from_dict']

from simvariate.core.simexception import SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc
from simvariate.variates.parameters import DistributionKind, ParameterSet

logger = SimLogging.get_logger(__name__)

_FACTORY_ERROR = "Random Variable Factory Error"


@apidoc
def random_variable_kinds():
    """
    Return a list of all distribution kinds, in declaration order
    """
    return list(DistributionKind)


def _kind(kind):
    if isinstance(kind, DistributionKind):
        return kind
    if isinstance(kind, str):
        return DistributionKind.from_label(kind)
    msg = "{0} is not a DistributionKind or distribution kind label"
    raise SimDomainError(_FACTORY_ERROR, msg, kind)


@apidoc
def create_parameters(kind):
    """
    Create a parameter set with the default values for a distribution
    kind.
    
    :param kind: The distribution kind, or its label (e.g. 'Normal')
    :type kind:  :class:`~.parameters.DistributionKind` or `str`
    
    :return: A new parameter set
    :rtype:  :class:`~.parameters.ParameterSet`
    
    """
    return ParameterSet(_kind(kind))


@apidoc
def create_rvariable(parameter_set, stream=None, name=None):
    """
    Create a random variable from a parameter set.
    
    :param parameter_set: The parameter values
    :type parameter_set:  :class:`~.parameters.ParameterSet`
    
    :param stream:        The stream to bind to, or None for a new
                          independent stream
    
    :param name:          Optional random variable name
    :type name:           `str`
    
    """
    if not isinstance(parameter_set, ParameterSet):
        msg = "{0} is not a ParameterSet"
        raise SimDomainError(_FACTORY_ERROR, msg, parameter_set)
    rv = parameter_set.create_rvariable(stream, name)
    logger.debug("Created random variable %s", rv)
    return rv


@apidoc
def create_rvariable_from_dict(data, stream=None, name=None):
    """
    Create a random variable from a parameter set in export format
    (see :meth:`~.parameters.ParameterSet.as_dict`)
    """
    return create_rvariable(ParameterSet.from_dict(data), stream, name)
