#===============================================================================
# PACKAGE simvariate.numerics
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Iterative numerical primitives (continued fractions, bisection root
# finding) and the special functions and distribution functions built
# on them.
#===============================================================================
