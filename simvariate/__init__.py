#===============================================================================
# PACKAGE simvariate
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Reproducible, parameterized pseudo-random variate generation for
# discrete-event simulation.
#===============================================================================
__version__ = '0.1.0'
