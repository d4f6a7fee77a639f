#===============================================================================
# MODULE algorithms_test
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Unit tests for the algorithms module: variate generation functions,
# parameter validation and the discrete selection utilities
#===============================================================================
import math
import unittest, logging
from unittest import mock

import scipy.stats

from simvariate.core import simrandom, SimDomainError, SimConvergenceError
from simvariate.core.simlogging import SimLogging
from simvariate.core import stats
from simvariate.variates import algorithms as alg
from simvariate.variates.algorithms import GammaAlgorithm


class FixedStream(object):
    """
    A uniform stream that replays a fixed sequence of deviates, cycling
    back to the start when exhausted.
    """
    def __init__(self, *values):
        self.values = values
        self.index = 0
        
    def next_uniform(self):
        u = self.values[self.index % len(self.values)]
        self.index += 1
        return u
    
    def rand_int(self, lo, hi):
        return lo + int(self.next_uniform() * (hi - lo + 1))
    

class AlgorithmTestBase(unittest.TestCase):
    def setUp(self):
        SimLogging.set_level(logging.CRITICAL)
        simrandom.initialize(1)
        self.stream = simrandom.rn_stream(1)
        
    def sample(self, func, *args, n=10000):
        return [func(*args, stream=self.stream) for _ in range(n)]
    
    
class ValidationTests(AlgorithmTestBase):
    "Tests for parameter validation by the r_<kind> functions"
    def testBernoulliProbability(self):
        "Test: Bernoulli probability outside (0,1) raises"
        self.assertRaises(SimDomainError, alg.r_bernoulli, 0.0, self.stream)
        self.assertRaises(SimDomainError, alg.r_bernoulli, 1.0, self.stream)
        
    def testBinomialTrials(self):
        "Test: Binomial with a non-integer or zero number of trials raises"
        self.assertRaises(SimDomainError, alg.r_binomial, 0.5, 2.5, self.stream)
        self.assertRaises(SimDomainError, alg.r_binomial, 0.5, 0, self.stream)
        
    def testPoissonMean(self):
        "Test: Poisson with a non-positive mean raises"
        self.assertRaises(SimDomainError, alg.r_poisson, 0.0, self.stream)
        
    def testDUniformRange(self):
        "Test: DUniform with min > max or a non-integer limit raises"
        self.assertRaises(SimDomainError, alg.r_duniform, 5, 4, self.stream)
        self.assertRaises(SimDomainError, alg.r_duniform, 1.5, 4, self.stream)
        
    def testNegBinomialSuccesses(self):
        "Test: NegativeBinomial with a non-positive number of successes raises"
        self.assertRaises(SimDomainError, alg.r_neg_binomial, 0.5, 0.0, self.stream)
        
    def testUniformRange(self):
        "Test: Uniform with min >= max raises"
        self.assertRaises(SimDomainError, alg.r_uniform, 1.0, 1.0, self.stream)
        
    def testNormalVariance(self):
        "Test: Normal with a non-positive variance raises"
        self.assertRaises(SimDomainError, alg.r_normal, 0.0, -1.0, self.stream)
        
    def testLognormalMean(self):
        "Test: Lognormal with a non-positive mean raises"
        self.assertRaises(SimDomainError, alg.r_lognormal, 0.0, 1.0, self.stream)
        
    def testWeibullShape(self):
        "Test: Weibull with a non-positive shape or scale raises"
        self.assertRaises(SimDomainError, alg.r_weibull, 0.0, 1.0, self.stream)
        self.assertRaises(SimDomainError, alg.r_weibull, 1.0, 0.0, self.stream)
        
    def testTriangularMode(self):
        "Test: Triangular with the mode outside [min, max] raises"
        self.assertRaises(SimDomainError, alg.r_triangular, 0.0, 2.0, 1.0,
                          self.stream)
        
    def testJohnsonBAlpha2(self):
        "Test: JohnsonB with a non-positive alpha2 raises"
        self.assertRaises(SimDomainError, alg.r_johnsonb, 1.0, 0.0, 0.0, 1.0,
                          self.stream)
        
    def testGammaAlgorithm(self):
        "Test: r_gamma() with an invalid algorithm raises"
        self.assertRaises(SimDomainError, alg.r_gamma, 2.0, 1.0, self.stream,
                          'bogus')
        
    def testPearsonType6Beta(self):
        "Test: PearsonType6 with a non-positive beta raises"
        self.assertRaises(SimDomainError, alg.r_pearson_type6, 1.0, 1.0, 0.0,
                          self.stream)
        
    def testEmptyPopulation(self):
        "Test: Empirical with an empty population raises"
        self.assertRaises(SimDomainError, alg.r_empirical, [], self.stream)
        
    def testDEmpiricalLengthMismatch(self):
        "Test: DEmpirical with values and cdf of different lengths raises"
        self.assertRaises(SimDomainError, alg.r_dempirical, [1, 2, 3],
                          [0.5, 1.0], self.stream)
        
    def testDEmpiricalInvalidCdf(self):
        "Test: DEmpirical with an invalid cdf raises"
        self.assertRaises(SimDomainError, alg.r_dempirical, [1, 2],
                          [0.5, 0.9], self.stream)
        
        
class DiscreteUtilityTests(AlgorithmTestBase):
    "Tests for CDF/PMF validation and the selection utilities"
    def testValidCdf(self):
        "Test: is_valid_cdf() accepts a non-decreasing sequence ending in 1.0"
        self.assertTrue(alg.is_valid_cdf([0.35, 0.8, 1.0]))
        self.assertTrue(alg.is_valid_cdf([0.5, 0.5, 1.0]))
        self.assertTrue(alg.is_valid_cdf([1.0]))
        
    def testInvalidCdf(self):
        "Test: is_valid_cdf() rejects empty, decreasing, out of range or not ending in 1.0"
        self.assertFalse(alg.is_valid_cdf([]))
        self.assertFalse(alg.is_valid_cdf(None))
        self.assertFalse(alg.is_valid_cdf([0.5, 0.4, 1.0]))
        self.assertFalse(alg.is_valid_cdf([-0.1, 1.0]))
        self.assertFalse(alg.is_valid_cdf([0.5, 0.99]))
        
    def testValidPmf(self):
        "Test: is_valid_pmf() accepts two or more probabilities summing to <= 1"
        self.assertTrue(alg.is_valid_pmf([0.2, 0.3, 0.5]))
        self.assertTrue(alg.is_valid_pmf([0.2, 0.3]))
        
    def testInvalidPmf(self):
        "Test: is_valid_pmf() rejects single values, zeros and sums over 1"
        self.assertFalse(alg.is_valid_pmf([0.5]))
        self.assertFalse(alg.is_valid_pmf([0.0, 0.5, 0.5]))
        self.assertFalse(alg.is_valid_pmf([0.6, 0.6]))
        
    def testMakeCdf(self):
        "Test: make_cdf() accumulates the pmf and ends in exactly 1.0"
        cdf = alg.make_cdf([0.1, 0.2, 0.3, 0.4])
        self.assertEqual(len(cdf), 4)
        self.assertAlmostEqual(cdf[0], 0.1)
        self.assertAlmostEqual(cdf[1], 0.3)
        self.assertAlmostEqual(cdf[2], 0.6)
        self.assertEqual(cdf[3], 1.0)
        self.assertTrue(alg.is_valid_cdf(cdf))
        
    def testMakeCdfInvalid(self):
        "Test: make_cdf() of an invalid pmf raises"
        self.assertRaises(SimDomainError, alg.make_cdf, [0.7, 0.7])
        
    def testRandomlySelectWithCdf(self):
        "Test: randomly_select() picks the first value whose cdf exceeds u"
        values = ['a', 'b', 'c']
        cdf = [0.35, 0.8, 1.0]
        self.assertEqual(alg.randomly_select(values, cdf, FixedStream(0.1)), 'a')
        self.assertEqual(alg.randomly_select(values, cdf, FixedStream(0.35)), 'b')
        self.assertEqual(alg.randomly_select(values, cdf, FixedStream(0.9)), 'c')
        
    def testRandomlySelectZeroProbability(self):
        "Test: randomly_select() never picks a value with zero probability"
        values = [1, 2, 3]
        cdf = [0.5, 0.5, 1.0]
        selected = {alg.randomly_select(values, cdf, self.stream)
                    for _ in range(1000)}
        self.assertEqual(selected, {1, 3})
        
    def testRandomlySelectEqualProbability(self):
        "Test: randomly_select() without a cdf picks each value equally often"
        values = ['x', 'y', 'z', 'w']
        sample = [alg.randomly_select(values, stream=self.stream)
                  for _ in range(20000)]
        for value, freq in stats.frequencies(sample, values).items():
            self.assertAlmostEqual(freq, 0.25, delta=0.015)
            
    def testRandomlySelectSingleValue(self):
        "Test: randomly_select() of a single value returns it"
        self.assertEqual(alg.randomly_select([42], stream=self.stream), 42)
        self.assertEqual(alg.randomly_select([42], [1.0], self.stream), 42)
        
    def testRandomlySelectEmpty(self):
        "Test: randomly_select() of an empty sequence raises"
        self.assertRaises(SimDomainError, alg.randomly_select, [], None,
                          self.stream)
        
    def testSampleWithoutReplacement(self):
        "Test: sample_without_replacement() returns distinct elements of the sequence"
        seq = list(range(20))
        sample = alg.sample_without_replacement(seq, 8, self.stream)
        self.assertEqual(len(sample), 8)
        self.assertEqual(len(set(sample)), 8)
        self.assertEqual(sample, seq[:8])
        self.assertEqual(sorted(seq), list(range(20)))
        
    def testSampleWithoutReplacementTooLarge(self):
        "Test: sample_without_replacement() of more elements than the sequence raises"
        self.assertRaises(SimDomainError, alg.sample_without_replacement,
                          [1, 2, 3], 4, self.stream)
        
    def testPermute(self):
        "Test: permute() rearranges the sequence in place"
        seq = list(range(50))
        result = alg.permute(seq, self.stream)
        self.assertIs(result, seq)
        self.assertEqual(sorted(seq), list(range(50)))
        self.assertNotEqual(seq, list(range(50)))
        
        
class InverseTransformTests(AlgorithmTestBase):
    "Tests of inverse transform generation against known deviates"
    def testUniform(self):
        "Test: r_uniform() maps u linearly onto [min, max]"
        self.assertEqual(alg.r_uniform(2.0, 6.0, FixedStream(0.25)), 3.0)
        
    def testExponential(self):
        "Test: r_exponential() is -mean * log(1-u)"
        self.assertAlmostEqual(alg.r_exponential(2.0, FixedStream(0.5)),
                               2.0 * math.log(2.0), places=12)
        
    def testNormalMedian(self):
        "Test: r_normal() of u = 0.5 is the mean"
        self.assertAlmostEqual(alg.r_normal(3.0, 4.0, FixedStream(0.5)), 3.0,
                               places=12)
        
    def testNormalQuantile(self):
        "Test: r_normal() of u matches the scipy normal quantile"
        value = alg.r_normal(3.0, 4.0, FixedStream(0.975))
        self.assertAlmostEqual(value, scipy.stats.norm.ppf(0.975, 3.0, 2.0),
                               places=7)
        
    def testLaplaceMedian(self):
        "Test: r_laplace() of u = 0.5 is the mean"
        self.assertEqual(alg.r_laplace(1.5, 2.0, FixedStream(0.5)), 1.5)
        
    def testTriangularMode(self):
        "Test: r_triangular() at the mode's cdf value returns the mode"
        # cdf(mode) = (mode - min) / (max - min) = 0.25
        self.assertAlmostEqual(alg.r_triangular(0.0, 1.0, 4.0, FixedStream(0.25)),
                               1.0, places=12)
        
    def testTriangularModeAtLimits(self):
        "Test: r_triangular() with the mode at min or max stays in range"
        for mode in (0.0, 4.0):
            for u in (0.01, 0.5, 0.99):
                x = alg.r_triangular(0.0, mode, 4.0, FixedStream(u))
                self.assertTrue(0.0 <= x <= 4.0)
                
    def testJohnsonBMedian(self):
        "Test: r_johnsonb() with alpha1 = 0 at u = 0.5 is the range midpoint"
        self.assertAlmostEqual(alg.r_johnsonb(0.0, 1.0, 2.0, 6.0, FixedStream(0.5)),
                               4.0, places=12)
        
    def testLogLogisticMedian(self):
        "Test: r_loglogistic() at u = 0.5 is the scale"
        self.assertAlmostEqual(alg.r_loglogistic(3.0, 2.0, FixedStream(0.5)),
                               2.0, places=12)
        
    def testBernoulli(self):
        "Test: r_bernoulli() is 1 when u <= p, otherwise 0"
        self.assertEqual(alg.r_bernoulli(0.3, FixedStream(0.3)), 1.0)
        self.assertEqual(alg.r_bernoulli(0.3, FixedStream(0.31)), 0.0)
        
    def testGeometric(self):
        "Test: r_geometric() is zero for u <= p"
        self.assertEqual(alg.r_geometric(0.4, FixedStream(0.3)), 0)
        self.assertEqual(alg.r_geometric(0.4, FixedStream(0.5)), 1)
        
    def testShiftedGeometric(self):
        "Test: r_shifted_geometric() is r_geometric() + 1"
        self.assertEqual(alg.r_shifted_geometric(0.4, FixedStream(0.3)), 1)
        
    def testDUniform(self):
        "Test: r_duniform() of extreme deviates returns the limits"
        self.assertEqual(alg.r_duniform(3, 7, FixedStream(0.0001)), 3)
        self.assertEqual(alg.r_duniform(3, 7, FixedStream(0.9999)), 7)
        
    def testConstant(self):
        "Test: r_constant() returns the value and draws no deviate"
        stream = FixedStream(0.5)
        self.assertEqual(alg.r_constant(4.5, stream), 4.5)
        self.assertEqual(stream.index, 0)
        
    def testAntitheticPair(self):
        "Test: an antithetic stream inverts the variate ordering"
        astream = self.stream.new_antithetic_instance()
        median = math.log(2.0)
        for _ in range(100):
            x = alg.r_exponential(1.0, self.stream)
            y = alg.r_exponential(1.0, astream)
            self.assertLessEqual((x - median) * (y - median), 0.0)
            
            
class SampleMomentTests(AlgorithmTestBase):
    "Tests that generated samples have the expected means and distributions"
    def assertMean(self, values, expected):
        summary = stats.summarize(values)
        self.assertTrue(stats.mean_within(values, expected),
                        "mean {0} not within 4 standard errors ({1}) of {2}".format(
                            summary.mean, summary.std_error, expected))
        
    def assertFits(self, values, cdf):
        statistic, pvalue = stats.ks_test(values, cdf)
        self.assertGreater(pvalue, 0.001)
        
    def testBinomial(self):
        "Test: Binomial(0.3, 20) sample mean is n*p"
        self.assertMean(self.sample(alg.r_binomial, 0.3, 20), 6.0)
        
    def testPoisson(self):
        "Test: Poisson(4.5) sample mean"
        self.assertMean(self.sample(alg.r_poisson, 4.5), 4.5)
        
    def testNegBinomial(self):
        "Test: NegativeBinomial(0.4, 3) sample mean is r(1-p)/p"
        self.assertMean(self.sample(alg.r_neg_binomial, 0.4, 3.0), 4.5)
        
    def testGeometricMean(self):
        "Test: Geometric(0.25) sample mean is (1-p)/p"
        self.assertMean(self.sample(alg.r_geometric, 0.25), 3.0)
        
    def testNormalFit(self):
        "Test: Normal(10, 4) sample fits the normal CDF"
        self.assertFits(self.sample(alg.r_normal, 10.0, 4.0),
                        scipy.stats.norm(10.0, 2.0).cdf)
        
    def testLognormalMean(self):
        "Test: Lognormal(2, 1) sample mean"
        self.assertMean(self.sample(alg.r_lognormal, 2.0, 1.0, n=40000), 2.0)
        
    def testWeibullFit(self):
        "Test: Weibull(2, 3) sample fits the Weibull CDF"
        self.assertFits(self.sample(alg.r_weibull, 2.0, 3.0),
                        scipy.stats.weibull_min(2.0, scale=3.0).cdf)
        
    def testGammaInverseFit(self):
        "Test: Gamma(2.5, 2) by inversion fits the gamma CDF"
        self.assertFits(self.sample(alg.r_gamma, 2.5, 2.0, n=3000),
                        scipy.stats.gamma(2.5, scale=2.0).cdf)
        
    def testGammaRejectionSmallShape(self):
        "Test: Gamma(0.5, 2) by acceptance-rejection sample mean and fit"
        values = [alg.r_gamma(0.5, 2.0, self.stream,
                              GammaAlgorithm.ACCEPTANCE_REJECTION)
                  for _ in range(10000)]
        self.assertMean(values, 1.0)
        self.assertFits(values, scipy.stats.gamma(0.5, scale=2.0).cdf)
        
    def testGammaRejectionLargeShape(self):
        "Test: Gamma(5, 1.5) by acceptance-rejection sample mean and fit"
        values = [alg.r_gamma(5.0, 1.5, self.stream,
                              GammaAlgorithm.ACCEPTANCE_REJECTION)
                  for _ in range(10000)]
        self.assertMean(values, 7.5)
        self.assertFits(values, scipy.stats.gamma(5.0, scale=1.5).cdf)
        
    def testChiSquaredMean(self):
        "Test: ChiSquared(3) sample mean is the degrees of freedom"
        self.assertMean(self.sample(alg.r_chi_squared, 3.0, n=3000), 3.0)
        
    def testBetaFit(self):
        "Test: Beta(2, 5) sample fits the beta CDF"
        self.assertFits(self.sample(alg.r_beta, 2.0, 5.0, n=3000),
                        scipy.stats.beta(2.0, 5.0).cdf)
        
    def testGeneralizedBetaRange(self):
        "Test: GeneralizedBeta(2, 2, 10, 20) values are in [10, 20], mean 15"
        values = self.sample(alg.r_generalized_beta, 2.0, 2.0, 10.0, 20.0, n=3000)
        self.assertTrue(all(10.0 <= x <= 20.0 for x in values))
        self.assertMean(values, 15.0)
        
    def testPearsonType5Mean(self):
        "Test: PearsonType5(4, 6) sample mean is scale/(shape-1)"
        self.assertMean(self.sample(alg.r_pearson_type5, 4.0, 6.0, n=3000), 2.0)
        
    def testPearsonType6Mean(self):
        "Test: PearsonType6(3, 5, 2) sample mean is beta*alpha1/(alpha2-1)"
        self.assertMean(self.sample(alg.r_pearson_type6, 3.0, 5.0, 2.0, n=3000),
                        1.5)
        
    def testLaplaceFit(self):
        "Test: Laplace(1, 2) sample fits the Laplace CDF"
        self.assertFits(self.sample(alg.r_laplace, 1.0, 2.0),
                        scipy.stats.laplace(1.0, 2.0).cdf)
        
    def testTriangularFit(self):
        "Test: Triangular(1, 2, 5) sample fits the triangular CDF"
        self.assertFits(self.sample(alg.r_triangular, 1.0, 2.0, 5.0),
                        scipy.stats.triang(0.25, loc=1.0, scale=4.0).cdf)
        
    def testEmpiricalMean(self):
        "Test: Empirical sample mean is the population mean"
        population = [1.0, 2.0, 4.0, 9.0]
        self.assertMean(self.sample(alg.r_empirical, population), 4.0)
        
        
class RejectionCapTests(AlgorithmTestBase):
    "Tests of the acceptance-rejection soft cap"
    def testSoftCapDefault(self):
        "Test: the default soft cap is the configured value"
        self.assertEqual(alg.rejection_soft_cap(), 10000000)
        
    def testSoftCapExceeded(self):
        "Test: reaching the soft cap raises SimConvergenceError"
        with mock.patch.object(alg, '_rejection_soft_cap', 0):
            self.assertRaises(SimConvergenceError, alg.r_gamma, 0.5, 1.0,
                              self.stream, GammaAlgorithm.ACCEPTANCE_REJECTION)
            self.assertRaises(SimConvergenceError, alg.r_gamma, 3.0, 1.0,
                              self.stream, GammaAlgorithm.ACCEPTANCE_REJECTION)
            
    def testShapeOneIgnoresCap(self):
        "Test: Gamma with shape 1 is exponential and never rejects"
        with mock.patch.object(alg, '_rejection_soft_cap', 0):
            x = alg.r_gamma(1.0, 2.0, FixedStream(0.5),
                            GammaAlgorithm.ACCEPTANCE_REJECTION)
        self.assertAlmostEqual(x, 2.0 * math.log(2.0), places=12)
        
        
def makeTestSuite():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()
    suite.addTest(loader.loadTestsFromTestCase(ValidationTests))
    suite.addTest(loader.loadTestsFromTestCase(DiscreteUtilityTests))
    suite.addTest(loader.loadTestsFromTestCase(InverseTransformTests))
    suite.addTest(loader.loadTestsFromTestCase(SampleMomentTests))
    suite.addTest(loader.loadTestsFromTestCase(RejectionCapTests))
    return suite


if __name__ == '__main__':
    unittest.main()
