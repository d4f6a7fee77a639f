#===============================================================================
# PACKAGE simvariate.variates
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Variate generation algorithms, random variables and the parameter set
# model used to create and reconfigure them.
#===============================================================================
