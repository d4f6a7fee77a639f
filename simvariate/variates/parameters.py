#===============================================================================
# MODULE parameters
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines the ParameterSet model: the DataType and DistributionKind
# enumerations and the ParameterSet class.
#
# Each DistributionKind member carries its parameter shape - an ordered
# tuple of ParameterSpec (name, data type, default) - and the name of the
# random variable class that implements it. The class is resolved lazily
# (via the rvtypes module) so that this module does not depend on the
# random variable implementations.
#
# A ParameterSet holds one value per declared parameter of its kind, in
# three maps keyed by data type. The set of names is fixed when the
# parameter set is created; values may be changed in place (typically
# between simulation runs) and the set then used to create a new random
# variable. Parameter values are not validated until a random variable is
# created from them.
#
# The export format (as_dict()/from_dict()) is:
#
#     {'kind': 'Normal',
#      'doubleParameters': {'mean': 0.0, 'variance': 1.0},
#      'integerParameters': {},
#      'doubleArrayParameters': {}}
#
# ParameterSets are not thread-safe.
#===============================================================================
__all__ = ['DataType', 'ParameterSpec', 'DistributionKind', 'ParameterSet']

import math
import importlib
from enum import Enum
from typing import NamedTuple

from simvariate.core.simexception import SimDomainError, SimLookupError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc, apidocskip

logger = SimLogging.get_logger(__name__)

_PARAMETER_ERROR = "Random Variable Parameter Error"
_LOOKUP_ERROR = "Random Variable Parameter Not Found"

_RVTYPES_MODULE = 'simvariate.variates.rvtypes'


@apidoc
class DataType(Enum):
    """
    The data type of a distribution parameter
    """
    DOUBLE = 'double'
    INTEGER = 'integer'
    DOUBLE_ARRAY = 'doubleArray'
    
    def coerce(self, value):
        """
        Convert a value to this data type, raising a SimDomainError if that
        cannot be done without loss. Arrays are always copied.
        """
        try:
            if self is DataType.DOUBLE:
                return float(value)
            if self is DataType.INTEGER:
                ivalue = int(value)
                if ivalue != value:
                    msg = "Integer parameter value ({0}) is not integral"
                    raise SimDomainError(_PARAMETER_ERROR, msg, value)
                return ivalue
            return tuple(float(v) for v in value)
        except (TypeError, ValueError, OverflowError) as e:
            msg = "Value {0} cannot be converted to {1}: {2}"
            raise SimDomainError(_PARAMETER_ERROR, msg, value, self.value, e)


class ParameterSpec(NamedTuple):
    """
    A declared distribution parameter
    """
    name: str
    data_type: DataType
    default: object


def _double(name, default):
    return ParameterSpec(name, DataType.DOUBLE, default)

def _integer(name, default):
    return ParameterSpec(name, DataType.INTEGER, default)

def _array(name, default):
    return ParameterSpec(name, DataType.DOUBLE_ARRAY, tuple(default))


@apidoc
class DistributionKind(Enum):
    """
    The closed set of distribution kinds. Each member has a
    :attr:`label` (used in the export format), a parameter shape
    (:attr:`parameter_specs`) and a random variable class
    (:attr:`rv_class`).
    """
    BERNOULLI = ('Bernoulli', 'BernoulliRV',
                 (_double('probOfSuccess', 0.5),))
    BETA = ('Beta', 'BetaRV',
            (_double('alpha1', 1.0), _double('alpha2', 1.0)))
    CHI_SQUARED = ('ChiSquared', 'ChiSquaredRV',
                   (_double('dof', 1.0),))
    BINOMIAL = ('Binomial', 'BinomialRV',
                (_double('probOfSuccess', 0.5), _integer('numTrials', 2)))
    CONSTANT = ('Constant', 'ConstantRV',
                (_double('value', 1.0),))
    DUNIFORM = ('DUniform', 'DUniformRV',
                (_integer('min', 0), _integer('max', 1)))
    EXPONENTIAL = ('Exponential', 'ExponentialRV',
                   (_double('mean', 1.0),))
    GAMMA = ('Gamma', 'GammaRV',
             (_double('shape', 1.0), _double('scale', 1.0)))
    GENERALIZED_BETA = ('GeneralizedBeta', 'GeneralizedBetaRV',
                        (_double('alpha1', 1.0), _double('alpha2', 1.0),
                         _double('min', 0.0), _double('max', 1.0)))
    GEOMETRIC = ('Geometric', 'GeometricRV',
                 (_double('probOfSuccess', 0.5),))
    JOHNSONB = ('JohnsonB', 'JohnsonBRV',
                (_double('alpha1', 0.0), _double('alpha2', 1.0),
                 _double('min', 0.0), _double('max', 1.0)))
    LAPLACE = ('Laplace', 'LaplaceRV',
               (_double('mean', 0.0), _double('scale', 1.0)))
    LOGLOGISTIC = ('LogLogistic', 'LogLogisticRV',
                   (_double('shape', 1.0), _double('scale', 1.0)))
    LOGNORMAL = ('Lognormal', 'LognormalRV',
                 (_double('mean', 1.0), _double('variance', 1.0)))
    NEGATIVE_BINOMIAL = ('NegativeBinomial', 'NegativeBinomialRV',
                         (_double('probOfSuccess', 0.5),
                          _double('numSuccesses', 1.0)))
    NORMAL = ('Normal', 'NormalRV',
              (_double('mean', 0.0), _double('variance', 1.0)))
    PEARSON_TYPE5 = ('PearsonType5', 'PearsonType5RV',
                     (_double('shape', 1.0), _double('scale', 1.0)))
    PEARSON_TYPE6 = ('PearsonType6', 'PearsonType6RV',
                     (_double('alpha1', 2.0), _double('alpha2', 3.0),
                      _double('beta', 1.0)))
    POISSON = ('Poisson', 'PoissonRV',
               (_double('mean', 1.0),))
    SHIFTED_GEOMETRIC = ('ShiftedGeometric', 'ShiftedGeometricRV',
                         (_double('probOfSuccess', 0.5),))
    TRIANGULAR = ('Triangular', 'TriangularRV',
                  (_double('min', 0.0), _double('mode', 0.5),
                   _double('max', 1.0)))
    UNIFORM = ('Uniform', 'UniformRV',
               (_double('min', 0.0), _double('max', 1.0)))
    WEIBULL = ('Weibull', 'WeibullRV',
               (_double('shape', 1.0), _double('scale', 1.0)))
    DEMPIRICAL = ('DEmpirical', 'DEmpiricalRV',
                  (_array('values', (0.0, 1.0)), _array('cdf', (0.5, 1.0))))
    EMPIRICAL = ('Empirical', 'EmpiricalRV',
                 (_array('population', (0.0,)),))
    AR1NORMAL = ('AR1Normal', 'AR1NormalRV',
                 (_double('mean', 0.0), _double('variance', 1.0),
                  _double('correlation', 0.0)))
    
    def __init__(self, label, rv_class_name, parameter_specs):
        self.label = label
        self.rv_class_name = rv_class_name
        self.parameter_specs = parameter_specs
        
    @property
    def rv_class(self):
        """
        The :class:`~.rvariable.ParameterizedRandomVariable` subclass that
        implements this kind
        """
        rvtypes = importlib.import_module(_RVTYPES_MODULE)
        return getattr(rvtypes, self.rv_class_name)
    
    @staticmethod
    def from_label(label):
        """
        Return the kind with the passed label (e.g. 'Normal'). Raises a
        SimLookupError if there is no such kind.
        """
        for kind in DistributionKind:
            if kind.label == label:
                return kind
        raise SimLookupError(_LOOKUP_ERROR, "Unknown distribution kind: {0}",
                             label)
    
    def __str__(self):
        return self.label


def _round_half_up(value):
    try:
        return int(math.floor(value + 0.5))
    except (TypeError, ValueError, OverflowError) as e:
        msg = "Value {0} cannot be rounded to an integer: {1}"
        raise SimDomainError(_PARAMETER_ERROR, msg, value, e)


@apidoc
class ParameterSet(object):
    """
    The parameter values of a random variable of a specific
    :class:`DistributionKind`. A new parameter set holds the kind's default
    values.
    
    :param kind: The distribution kind
    :type kind:  :class:`DistributionKind`
    
    """
    def __init__(self, kind):
        if not isinstance(kind, DistributionKind):
            msg = "ParameterSet kind ({0}) is not a DistributionKind"
            raise SimDomainError(_PARAMETER_ERROR, msg, kind)
        self._kind = kind
        self._data_types = {}
        self._values = {DataType.DOUBLE: {},
                        DataType.INTEGER: {},
                        DataType.DOUBLE_ARRAY: {}}
        for spec in kind.parameter_specs:
            self._data_types[spec.name] = spec.data_type
            self._values[spec.data_type][spec.name] = spec.default
            
    @property
    def kind(self):
        return self._kind
    
    def parameter_names(self):
        """
        Return the declared parameter names, in declaration order
        """
        return [spec.name for spec in self._kind.parameter_specs]
    
    def contains_parameter(self, name):
        return name in self._data_types
    
    def data_type(self, name):
        """
        Return the :class:`DataType` of a declared parameter. Raises a
        SimLookupError if the name is not declared.
        """
        self._check_name(name)
        return self._data_types[name]
    
    def double_parameter_names(self):
        return list(self._values[DataType.DOUBLE])
    
    def integer_parameter_names(self):
        return list(self._values[DataType.INTEGER])
    
    def double_array_parameter_names(self):
        return list(self._values[DataType.DOUBLE_ARRAY])
    
    def _check_name(self, name):
        if name not in self._data_types:
            msg = "{0} has no parameter named {1}"
            raise SimLookupError(_LOOKUP_ERROR, msg, self._kind, name)
        
    def _check_type(self, name, data_type):
        self._check_name(name)
        declared = self._data_types[name]
        if declared is not data_type:
            msg = "{0} parameter {1} is {2}, not {3}"
            raise SimDomainError(_PARAMETER_ERROR, msg, self._kind, name,
                                 declared.value, data_type.value)
        
    def _change(self, name, data_type, value):
        self._check_type(name, data_type)
        if value is None:
            msg = "{0} parameter {1} value cannot be None"
            raise SimDomainError(_PARAMETER_ERROR, msg, self._kind, name)
        values = self._values[data_type]
        previous = values[name]
        values[name] = data_type.coerce(value)
        return previous
    
    def get_double_parameter(self, name):
        self._check_type(name, DataType.DOUBLE)
        return self._values[DataType.DOUBLE][name]
    
    def change_double_parameter(self, name, value):
        """
        Change a double parameter, returning the previous value. Raises a
        SimLookupError if the name is not declared, or a SimDomainError if
        it is not declared as a double.
        """
        return self._change(name, DataType.DOUBLE, value)
    
    def get_integer_parameter(self, name):
        self._check_type(name, DataType.INTEGER)
        return self._values[DataType.INTEGER][name]
    
    def change_integer_parameter(self, name, value):
        """
        Change an integer parameter, returning the previous value.
        """
        return self._change(name, DataType.INTEGER, value)
    
    def get_double_array_parameter(self, name):
        """
        Return a copy (a list) of a double array parameter
        """
        self._check_type(name, DataType.DOUBLE_ARRAY)
        return list(self._values[DataType.DOUBLE_ARRAY][name])
    
    def double_array_parameter_size(self, name):
        self._check_type(name, DataType.DOUBLE_ARRAY)
        return len(self._values[DataType.DOUBLE_ARRAY][name])
    
    def change_double_array_parameter(self, name, value):
        """
        Change a double array parameter to a copy of the passed sequence,
        returning the previous value (as a list).
        """
        return list(self._change(name, DataType.DOUBLE_ARRAY, value))
    
    def change_parameter(self, name, value):
        """
        Permissive form of the typed change methods. Sets a double
        parameter, or an integer parameter (rounding the value to the
        nearest integer). Returns False, rather than raising, if the name
        is not declared or names a double array parameter; a value that
        cannot be rounded to an integer (infinite or NaN) for an integer
        parameter raises a SimDomainError.
        
        :param name:  Parameter name
        :type name:   `str`
        
        :param value: New value
        :type value:  `float`
        
        :return:      True if the parameter was changed
        :rtype:       `bool`
        
        """
        data_type = self._data_types.get(name)
        if data_type is DataType.DOUBLE:
            self._change(name, data_type, value)
            return True
        if data_type is DataType.INTEGER:
            self._change(name, data_type, _round_half_up(value))
            return True
        return False
    
    @apidocskip
    def get_value(self, name):
        """
        Return the value of any declared parameter, by its declared type
        (arrays are returned as copies)
        """
        data_type = self.data_type(name)
        value = self._values[data_type][name]
        if data_type is DataType.DOUBLE_ARRAY:
            return list(value)
        return value
    
    @apidocskip
    def set_value(self, name, value):
        """
        Set any declared parameter, by its declared type
        """
        return self._change(name, self.data_type(name), value)
    
    def copy_from(self, other):
        """
        Copy all of the values of another parameter set of the same kind
        into this one.
        """
        if other is None:
            raise SimDomainError(_PARAMETER_ERROR,
                                 "Cannot copy from a None parameter set")
        if other.kind is not self._kind:
            msg = "Cannot copy {0} parameters into {1} parameters"
            raise SimDomainError(_PARAMETER_ERROR, msg, other.kind, self._kind)
        if other == self:
            return
        for data_type, values in other._values.items():
            self._values[data_type].update(values)
            
    def copy(self):
        """
        Return a new, equal parameter set
        """
        pset = ParameterSet(self._kind)
        pset.copy_from(self)
        return pset
    
    def create_rvariable(self, stream=None, name=None):
        """
        Create a random variable from the current parameter values. Raises
        a SimDomainError if the values are not valid for the kind.
        
        :param stream: The stream to bind to, or None for a new independent
                       stream
        
        :return: A new random variable
        :rtype:  :class:`~.rvariable.ParameterizedRandomVariable`
        
        """
        return self._kind.rv_class.from_parameters(self, stream, name)
    
    def as_dict(self):
        """
        Return the parameter set in export format; array values are
        exported as lists.
        """
        arrays = self._values[DataType.DOUBLE_ARRAY]
        return {'kind': self._kind.label,
                'doubleParameters': dict(self._values[DataType.DOUBLE]),
                'integerParameters': dict(self._values[DataType.INTEGER]),
                'doubleArrayParameters': {k: list(v) for k, v in arrays.items()}}
    
    @staticmethod
    def from_dict(data):
        """
        Create a parameter set from a dictionary in export format.
        Parameters missing from the dictionary keep their defaults; a
        parameter that is not declared for the kind raises a
        SimLookupError.
        """
        if 'kind' not in data:
            msg = "Parameter dictionary has no kind: {0}"
            raise SimDomainError(_PARAMETER_ERROR, msg, data)
        kind = DistributionKind.from_label(data['kind'])
        pset = ParameterSet(kind)
        for name, value in data.get('doubleParameters', {}).items():
            pset.change_double_parameter(name, value)
        for name, value in data.get('integerParameters', {}).items():
            pset.change_integer_parameter(name, value)
        for name, value in data.get('doubleArrayParameters', {}).items():
            pset.change_double_array_parameter(name, value)
        return pset
    
    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, ParameterSet):
            return NotImplemented
        return self._kind is other._kind and self._values == other._values
    
    def __hash__(self):
        items = []
        for data_type in DataType:
            items.extend(sorted(self._values[data_type].items()))
        return hash((self._kind, tuple(items)))
    
    def __str__(self):
        lines = ['Kind = {0}'.format(self._kind.label)]
        for data_type in DataType:
            values = self._values[data_type]
            if values:
                lines.append('{0} parameters: {1}'.format(
                    data_type.value, {k: v for k, v in values.items()}))
        return '\n'.join(lines)
    
    def __repr__(self):
        return 'ParameterSet({0})'.format(self.as_dict())
