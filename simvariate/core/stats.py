#===============================================================================
# MODULE stats
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines functions for summarizing and checking samples of generated
# variates - sample statistics, confidence intervals, empirical frequencies
# and a Kolmogorov-Smirnov goodness-of-fit test against a target CDF.
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
from collections import namedtuple
from enum import Enum
import warnings

import numpy as np
import scipy.stats

from simvariate.core.simexception import SimError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc, apidocskip

_NAN = float('nan')
_ERROR_NAME = "Stats Error"
logger = SimLogging.get_logger(__name__)

SampleSummary = namedtuple('SampleSummary',
                           'count mean variance std_error minimum maximum')


@apidoc
class CIType(Enum):
    """
    Enumeration of the currently supported confidence interval calculation types:
    
    * T: Confidence interval based on the Student's T distribution
    * NORMAL: Confidence interval based on the Normal distribution
    """
    T = 'TDistribution'
    NORMAL = 'NormalDistribution'


def summarize(values):
    """
    Return a :class:`SampleSummary` (count, mean, sample variance, standard
    error of the mean, minimum and maximum) for a sample of values.
    Variance and standard error are NaN for samples of fewer than two
    values.
    
    :param values: Sample values
    :type values:  Sequence or NumPy array of numeric values
    
    """
    a = np.asarray(values, dtype=float)
    n = a.size
    if n == 0:
        msg = "Cannot summarize an empty sample"
        raise SimError(_ERROR_NAME, msg)
    if n < 2:
        return SampleSummary(n, float(a[0]), _NAN, _NAN, float(a[0]), float(a[0]))
    var = float(np.var(a, ddof=1))
    return SampleSummary(n, float(np.mean(a)), var, float(scipy.stats.sem(a)),
                         float(np.min(a)), float(np.max(a)))


def confidence_interval(values, confidence_level=0.95, ci_type=CIType.T):
    """
    Calculate a confidence interval for the mean of a sample using the
    SciPy Student's t or normal distribution.
    
    :param values:           Sample values
    :type values:            Sequence or NumPy array of numeric values
    
    :param confidence_level: Desired confidence level. 
                             Defaults to 0.95 (95%).
    :type confidence_level:  `float` in range (.0, 1.0)
    
    :param ci_type:          Confidence interval type
    :type ci_type:           :class:`CIType`
    
    :return:                 Low and high bound of confidence interval, or
                             ``(nan, nan)`` if there are fewer than two values
    :rtype:                  `tuple` (numeric, numeric)
    
    """
    if not 0.0 < confidence_level < 1.0:
        msg = "Confidence level ({0}) must be in range (0, 1)"
        raise SimError(_ERROR_NAME, msg, confidence_level)
    
    a = np.asarray(values, dtype=float)
    if a.size < 2:
        return (_NAN, _NAN)
    
    loc = np.mean(a)
    scale = scipy.stats.sem(a)
    
    # A constant sample yields a zero scale, for which SciPy warns and
    # returns NaNs. The NaNs are fine.
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', category=RuntimeWarning)
        if ci_type == CIType.T:
            return scipy.stats.t.interval(confidence_level, a.size - 1, loc, scale)
        elif ci_type == CIType.NORMAL:
            return scipy.stats.norm.interval(confidence_level, loc, scale)
    
    msg = "Passed ci_type ({0}) is not of type CIType"
    raise SimError(_ERROR_NAME, msg, ci_type)


def mean_within(values, target, nstderr=4.0):
    """
    Returns True if the sample mean is within ``nstderr`` standard errors
    of a target value.
    """
    summary = summarize(values)
    return abs(summary.mean - target) <= nstderr * summary.std_error


def frequencies(values, support=None):
    """
    Return a dictionary mapping each distinct value (or each value of the
    passed support) to its relative frequency in the sample.
    """
    a = np.asarray(values)
    if a.size == 0:
        msg = "Cannot compute frequencies for an empty sample"
        raise SimError(_ERROR_NAME, msg)
    distinct, counts = np.unique(a, return_counts=True)
    freq = {k.item(): c / a.size for k, c in zip(distinct, counts)}
    if support is None:
        return freq
    return {k: freq.get(k, 0.0) for k in support}


def ks_test(values, cdf):
    """
    Kolmogorov-Smirnov test of a sample against a continuous CDF, via
    :func:`scipy.stats.kstest`.
    
    :param values: Sample values
    :type values:  Sequence or NumPy array of numeric values
    
    :param cdf:    The hypothesized cumulative distribution function,
                   vectorized or not
    :type cdf:     callable
    
    :return:       KS statistic and p-value
    :rtype:        `tuple` (float, float)
    
    """
    a = np.asarray(values, dtype=float)
    result = scipy.stats.kstest(a, np.vectorize(cdf))
    logger.debug("KS test: n=%d, statistic=%f, pvalue=%f", a.size,
                 result.statistic, result.pvalue)
    return result.statistic, result.pvalue
