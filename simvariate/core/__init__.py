#===============================================================================
# PACKAGE simvariate.core
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Core infrastructure: exceptions, logging, configuration, the numeric
# environment and uniform random number streams.
#===============================================================================
from simvariate.core.simexception import (SimException, SimError,
                                          SimDomainError, SimLookupError,
                                          SimConvergenceError)
from simvariate.core.simlogging import SimLogging
