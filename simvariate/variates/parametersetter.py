#===============================================================================
# MODULE parametersetter
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines the ParameterSetter class, which supports "prepare parameter
# edits, then apply them" reconfiguration of a set of named parameterized
# random variables (typically between simulation runs).
#
# The setter holds a parameter set snapshot for each registered random
# variable. Edits change the snapshots only; apply_parameter_changes()
# then rebuilds each random variable whose snapshot differs from its
# current parameters, binding the new random variable to the original's
# stream and name.
#===============================================================================
__all__ = ['ParameterSetter']

from simvariate.core.simexception import SimDomainError, SimLookupError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc
from simvariate.variates.parameters import DataType
from simvariate.variates.rvariable import ParameterizedRandomVariable

logger = SimLogging.get_logger(__name__)

_SETTER_ERROR = "Parameter Setter Error"
_LOOKUP_ERROR = "Random Variable Not Found"

DEFAULT_SEPARATOR = '_PARAM_'


@apidoc
class ParameterSetter(object):
    """
    Manages parameter changes for a registry of named parameterized
    random variables.
    
    :param random_variables: The random variables to manage, either a
                             mapping of name to random variable or an
                             iterable of random variables (registered by
                             their names)
    
    """
    def __init__(self, random_variables=()):
        self._rvs = {}
        self._parameters = {}
        if hasattr(random_variables, 'items'):
            for name, rv in random_variables.items():
                self.register(rv, name)
        else:
            for rv in random_variables:
                self.register(rv)
                
    def register(self, rv, name=None):
        """
        Add a random variable to the registry (under its own name, unless
        one is passed) and take a snapshot of its parameters. Raises a
        SimDomainError if the random variable is not parameterized or the
        name is already registered.
        """
        if not isinstance(rv, ParameterizedRandomVariable):
            msg = "Random variable {0} is not parameterized"
            raise SimDomainError(_SETTER_ERROR, msg, rv)
        name = rv.name if name is None else name
        if name in self._rvs:
            msg = "Random variable name {0} is already registered"
            raise SimDomainError(_SETTER_ERROR, msg, name)
        self._rvs[name] = rv
        self._parameters[name] = rv.get_parameters()
        
    def _check_name(self, rv_name):
        if rv_name not in self._rvs:
            msg = "No random variable named {0}"
            raise SimLookupError(_LOOKUP_ERROR, msg, rv_name)
        
    def random_variable_names(self):
        return list(self._rvs)
    
    def random_variable(self, rv_name):
        """
        Return the current random variable registered under a name
        (which is replaced by :meth:`apply_parameter_changes`)
        """
        self._check_name(rv_name)
        return self._rvs[rv_name]
    
    def parameters(self, rv_name):
        """
        Return the (editable) parameter set snapshot for a random variable.
        Changes made to it are applied by :meth:`apply_parameter_changes`.
        """
        self._check_name(rv_name)
        return self._parameters[rv_name]
    
    def __len__(self):
        return len(self._rvs)
    
    def parameters_as_dict(self):
        """
        Return ``{rv name: {parameter name: value}}`` for all double and
        integer parameters (integers are converted to floats). Array
        parameters are omitted.
        """
        result = {}
        for rv_name, pset in self._parameters.items():
            values = {}
            for pname in pset.parameter_names():
                data_type = pset.data_type(pname)
                if data_type is DataType.DOUBLE:
                    values[pname] = pset.get_double_parameter(pname)
                elif data_type is DataType.INTEGER:
                    values[pname] = float(pset.get_integer_parameter(pname))
            result[rv_name] = values
        return result
    
    def flat_parameters(self, separator=DEFAULT_SEPARATOR):
        """
        Return :meth:`parameters_as_dict` flattened to a single dictionary
        keyed by ``<rv name><separator><parameter name>``
        """
        if separator is None:
            raise SimDomainError(_SETTER_ERROR, "Separator cannot be None")
        return {rv_name + separator + pname: value
                for rv_name, values in self.parameters_as_dict().items()
                for pname, value in values.items()}
    
    def export_parameters(self):
        """
        Return ``{rv name: parameter set in export format}``
        """
        return {rv_name: pset.as_dict()
                for rv_name, pset in self._parameters.items()}
    
    def change_parameter(self, rv_name, param_name, value):
        """
        Change one double or integer parameter (rounding the value for an
        integer parameter) of a random variable's snapshot.
        
        :return: False if there is no such random variable or parameter,
                 or the parameter is an array
        :rtype:  `bool`
        
        """
        pset = self._parameters.get(rv_name)
        if pset is None:
            logger.warning("Parameter change request for unknown random variable %s",
                           rv_name)
            return False
        return pset.change_parameter(param_name, value)
    
    def change_parameters(self, settings):
        """
        Apply :meth:`change_parameter` for each value in a
        ``{rv name: {parameter name: value}}`` mapping; unknown names are
        ignored.
        
        :return: The number of parameters changed
        :rtype:  `int`
        
        """
        count = 0
        for rv_name, values in settings.items():
            for param_name, value in values.items():
                if self.change_parameter(rv_name, param_name, value):
                    count += 1
        return count
    
    def apply_parameter_changes(self):
        """
        Replace each registered random variable whose snapshot differs
        from its current parameters with a new random variable created from
        the snapshot, bound to the same stream and with the same name.
        
        Raises a SimDomainError (and leaves the registry unchanged) if any
        changed snapshot is not valid.
        
        :return: The number of random variables replaced
        :rtype:  `int`
        
        """
        replacements = {}
        for rv_name, rv in self._rvs.items():
            pset = self._parameters[rv_name]
            if pset != rv.get_parameters():
                replacements[rv_name] = rv.with_parameters(pset, rv.stream,
                                                           rv.name)
        self._rvs.update(replacements)
        logger.info("%d out of %d random variables were changed by the parameter setter",
                    len(replacements), len(self._rvs))
        return len(replacements)
