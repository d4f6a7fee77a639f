#===============================================================================
# MODULE simexception
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines the exception classes raised by variate generation and the
# numerical routines that support it.
#
# This program is free software: you can redistribute it and/or modify it under 
# the terms of the GNU General Public License as published by the Free Software 
# Foundation, either version 3 of the License, or (at your option) any later 
# version.
#
# This program is distributed in the hope that it will be useful, but WITHOUT 
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS 
# FOR A PARTICULAR PURPOSE. See the GNU General Public License for more details.
#===============================================================================
__all__ = ['SimException', 'SimError', 'SimDomainError', 'SimLookupError',
           'SimConvergenceError']
from simvariate.core.apidoc import apidoc, apidocskip

@apidoc
class SimException(Exception):
    r"""
    Base exception class, with message formatting, derived from the
    built-in Exception class.
    
    :param name:   Exception name
    :type name:    `str`
    
    :param desc:   Exception description string
    :type desc:   `str`
    
    :param \*args: Argument values to be substituted into the
                   description string.

    """
    def __init__(self, name, desc='', *args):
        super().__init__(name, desc, *args)
        self.name_ = name
        try:
            self.desc_ = desc.format(*args)
        except IndexError:
            self.desc_ = desc + " (Insufficient number of description parameters)"


@apidoc
class SimError(SimException):
    """
    Subclass of SimException for errors raised by the library.
    """
    def __str__(self):
        return 'SimException Error (' + self.name_ +'): ' + self.desc_


@apidoc
class SimDomainError(SimError):
    """
    Raised when a distribution, numerical routine or parameter set is
    constructed or called with parameter values outside of their valid
    domain - e.g. a probability outside of (0,1), a non-positive shape or
    scale, a lower bound that is not less than the upper bound, or a
    malformed CDF table. Always raised immediately, at construction time
    where possible.
    """


@apidoc
class SimLookupError(SimError, KeyError):
    """
    Raised when a parameter (or random variable) name is not one of the
    names declared for the target object.
    """
    def __str__(self):
        # KeyError.__str__ would repr() the args
        return SimError.__str__(self)


@apidoc
class SimConvergenceError(SimError):
    """
    Raised when an iterative calculation fails to converge and the caller
    cannot use an approximate result. The continued fraction and root
    finding primitives never raise this themselves; they report their
    achieved precision and leave the decision to their callers.
    """
