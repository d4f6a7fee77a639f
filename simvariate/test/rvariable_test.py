#===============================================================================
# MODULE rvariable_test
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Unit tests for the RandomVariable classes in the rvariable and rvtypes
# modules
#===============================================================================
import math
import itertools
import unittest, logging

import numpy as np

from simvariate.core import simrandom, SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core import stats
from simvariate.variates.parameters import DistributionKind, ParameterSet
from simvariate.variates.algorithms import GammaAlgorithm
from simvariate.variates.rvtypes import *

# Valid constructor arguments, and the closed range values must lie
# in, for every distribution kind
_RV_CASES = (
    (BernoulliRV, dict(prob_of_success=0.3), (0, 1)),
    (BinomialRV, dict(prob_of_success=0.4, num_trials=10), (0, 10)),
    (PoissonRV, dict(mean=3.0), (0, math.inf)),
    (DUniformRV, dict(minimum=-2, maximum=5), (-2, 5)),
    (GeometricRV, dict(prob_of_success=0.2), (0, math.inf)),
    (ShiftedGeometricRV, dict(prob_of_success=0.2), (1, math.inf)),
    (NegativeBinomialRV, dict(prob_of_success=0.5, num_successes=2.5),
     (0, math.inf)),
    (DEmpiricalRV, dict(values=(1.0, 2.0, 3.0), cdf=(0.35, 0.8, 1.0)), (1, 3)),
    (EmpiricalRV, dict(population=(2.0, 4.0, 8.0)), (2, 8)),
    (ConstantRV, dict(value=7.5), (7.5, 7.5)),
    (UniformRV, dict(minimum=2.0, maximum=3.0), (2, 3)),
    (NormalRV, dict(mean=10.0, variance=4.0), (-math.inf, math.inf)),
    (LognormalRV, dict(mean=2.0, variance=3.0), (0, math.inf)),
    (ExponentialRV, dict(mean=5.0), (0, math.inf)),
    (WeibullRV, dict(shape=2.0, scale=3.0), (0, math.inf)),
    (LogLogisticRV, dict(shape=3.0, scale=2.0), (0, math.inf)),
    (PearsonType5RV, dict(shape=3.0, scale=2.0), (0, math.inf)),
    (GammaRV, dict(shape=2.5, scale=1.5), (0, math.inf)),
    (TriangularRV, dict(minimum=1.0, mode=2.0, maximum=5.0), (1, 5)),
    (LaplaceRV, dict(mean=1.0, scale=2.0), (-math.inf, math.inf)),
    (ChiSquaredRV, dict(dof=4.0), (0, math.inf)),
    (BetaRV, dict(alpha1=2.0, alpha2=3.0), (0, 1)),
    (GeneralizedBetaRV, dict(alpha1=2.0, alpha2=3.0, minimum=10.0, maximum=20.0),
     (10, 20)),
    (JohnsonBRV, dict(alpha1=0.5, alpha2=1.5, minimum=-1.0, maximum=1.0), (-1, 1)),
    (PearsonType6RV, dict(alpha1=2.0, alpha2=3.0, beta=1.5), (0, math.inf)),
    (AR1NormalRV, dict(mean=0.0, variance=1.0, correlation=0.5),
     (-math.inf, math.inf)),
    )


class RandomVariableTestBase(unittest.TestCase):
    def setUp(self):
        SimLogging.set_level(logging.WARN)
        simrandom.initialize(1)
        
    def assertMean(self, values, expected):
        summary = stats.summarize(values)
        self.assertTrue(stats.mean_within(values, expected),
                        "mean {0} not within 4 standard errors ({1}) of {2}".format(
                            summary.mean, summary.std_error, expected))
        
        
class AllKindsTests(RandomVariableTestBase):
    "Tests applied to a random variable of every distribution kind"
    def testEveryKindCovered(self):
        "Test: there is a random variable class for every distribution kind"
        kinds = {rvclass.kind for rvclass, _, _ in _RV_CASES}
        self.assertEqual(kinds, set(DistributionKind))
        
    def testKindRVClass(self):
        "Test: each kind's rv_class is the class that declares the kind"
        for rvclass, _, _ in _RV_CASES:
            self.assertIs(rvclass.kind.rv_class, rvclass)
            
    def testSampleRange(self):
        "Test: 1000 samples of each kind lie within the distribution's range"
        for rvclass, kwargs, (lo, hi) in _RV_CASES:
            rv = rvclass(**kwargs)
            for _ in range(1000):
                x = rv.sample()
                self.assertTrue(lo <= x <= hi, "{0}: {1}".format(rv, x))
                
    def testPreviousValue(self):
        "Test: previous_value is NaN before sampling, then the last sample"
        for rvclass, kwargs, _ in _RV_CASES:
            rv = rvclass(**kwargs)
            self.assertTrue(math.isnan(rv.previous_value))
            x = rv.sample()
            self.assertEqual(rv.previous_value, x)
            
    def testGetParameters(self):
        "Test: get_parameters() returns a set of the class's kind holding the constructor values"
        for rvclass, kwargs, _ in _RV_CASES:
            rv = rvclass(**kwargs)
            pset = rv.get_parameters()
            self.assertIs(pset.kind, rvclass.kind)
            for pname, attr in rvclass._PARAMETERS:
                expected = kwargs[attr]
                if isinstance(expected, tuple):
                    expected = list(expected)
                self.assertEqual(pset.get_value(pname), expected)
                
    def testFromParameters(self):
        "Test: from_parameters() of get_parameters() creates an equivalent random variable"
        for rvclass, kwargs, _ in _RV_CASES:
            rv = rvclass(**kwargs)
            rv2 = rvclass.from_parameters(rv.get_parameters())
            self.assertIs(type(rv2), rvclass)
            self.assertEqual(rv2.get_parameters(), rv.get_parameters())
            
    def testNewInstanceSameStream(self):
        "Test: a new instance on a copy of the stream position reproduces the variates"
        for n, (rvclass, kwargs, _) in enumerate(_RV_CASES, 1):
            stream = simrandom.rn_stream(n)
            rv = rvclass(stream=stream, **kwargs)
            values1 = [rv.sample() for _ in range(20)]
            stream.reset_start_stream()
            rv2 = rv.new_instance(stream)
            self.assertIs(rv2.stream, stream)
            values2 = [rv2.sample() for _ in range(20)]
            self.assertEqual(values1, values2, str(rv))
            
    def testNewInstanceNewStream(self):
        "Test: new_instance() with no stream binds a different stream"
        for rvclass, kwargs, _ in _RV_CASES:
            rv = rvclass(**kwargs)
            self.assertIsNot(rv.new_instance().stream, rv.stream)
            
    def testRepr(self):
        "Test: repr() names the class"
        for rvclass, kwargs, _ in _RV_CASES:
            self.assertTrue(repr(rvclass(**kwargs)).startswith(rvclass.__name__))
            
            
class RandomVariableBaseTests(RandomVariableTestBase):
    "Tests of the behavior common to all random variables"
    def testDefaultStreams(self):
        "Test: random variables created without a stream get distinct new streams"
        rv1 = NormalRV()
        rv2 = NormalRV()
        self.assertIsNot(rv1.stream, rv2.stream)

    def testNewStreamIsNotDefault(self):
        "Test: a random variable created without a stream does not get the default stream"
        rv = NormalRV()
        self.assertIsNot(rv.stream, simrandom.default_stream())

    def testNewInstancesPastMaxStreams(self):
        "Test: new_instance() keeps working after max_streams() streams are in use"
        SimLogging.set_level(logging.ERROR)
        rv = NormalRV()
        identities = {rv.stream.stream_identity()}
        for _ in range(simrandom.max_streams() + 10):
            rv = rv.new_instance()
            identities.add(rv.stream.stream_identity())
        self.assertEqual(len(identities), simrandom.max_streams() + 11)
        self.assertTrue(math.isfinite(rv.sample()))

    def testSharedStream(self):
        "Test: random variables may share a stream"
        stream = simrandom.rn_stream(1)
        rv1 = NormalRV(stream=stream)
        rv2 = ExponentialRV(stream=stream)
        self.assertIs(rv1.stream, rv2.stream)
        
    def testUniqueIds(self):
        "Test: each random variable has a unique id"
        ids = {UniformRV().id for _ in range(10)}
        self.assertEqual(len(ids), 10)
        
    def testName(self):
        "Test: the name defaults to the class name and id, or is as passed"
        rv = UniformRV()
        self.assertEqual(rv.name, 'UniformRV_{0}'.format(rv.id))
        self.assertEqual(UniformRV(name='ServiceTime').name, 'ServiceTime')
        
    def testGetValueAlias(self):
        "Test: get_value() is an alias for sample()"
        rv = UniformRV()
        x = rv.get_value()
        self.assertEqual(rv.previous_value, x)
        
    def testSampleN(self):
        "Test: sample_n() returns a NumPy array of n values"
        rv = UniformRV(2.0, 3.0)
        values = rv.sample_n(50)
        self.assertIsInstance(values, np.ndarray)
        self.assertEqual(values.shape, (50,))
        self.assertEqual(rv.previous_value, values[-1])
        self.assertEqual(rv.sample_n(0).size, 0)
        
    def testSampleNNegative(self):
        "Test: sample_n() of a negative size raises"
        self.assertRaises(SimDomainError, UniformRV().sample_n, -1)
        
    def testIteration(self):
        "Test: iterating over a random variable yields successive samples"
        stream = simrandom.rn_stream(1)
        rv = UniformRV(stream=stream)
        values = list(itertools.islice(rv, 5))
        stream.reset_start_stream()
        self.assertEqual(values, list(rv.sample_n(5)))
        
    def testResetStartStream(self):
        "Test: reset_start_stream() repeats the variate sequence"
        rv = ExponentialRV(2.0)
        values1 = list(rv.sample_n(10))
        rv.reset_start_stream()
        self.assertEqual(list(rv.sample_n(10)), values1)
        
    def testSubstreams(self):
        "Test: advance_to_next_substream() and reset_start_substream()"
        rv = ExponentialRV(2.0)
        values0 = list(rv.sample_n(10))
        rv.advance_to_next_substream()
        values1 = list(rv.sample_n(10))
        self.assertNotEqual(values0, values1)
        rv.reset_start_substream()
        self.assertEqual(list(rv.sample_n(10)), values1)
        
    def testAntitheticInstance(self):
        "Test: new_antithetic_instance() generates from 1-u"
        rv = UniformRV(0.0, 10.0)
        arv = rv.new_antithetic_instance()
        self.assertTrue(arv.antithetic)
        self.assertFalse(rv.antithetic)
        for _ in range(10):
            self.assertAlmostEqual(rv.sample() + arv.sample(), 10.0, places=9)
            
    def testAntitheticNormal(self):
        "Test: antithetic normal variates are reflected about the mean"
        rv = NormalRV(5.0, 4.0)
        arv = rv.new_antithetic_instance()
        for _ in range(10):
            self.assertAlmostEqual(rv.sample() + arv.sample(), 10.0, places=7)
            
    def testSetAntithetic(self):
        "Test: setting antithetic on a random variable sets it on its stream"
        rv = UniformRV()
        rv.antithetic = True
        self.assertTrue(rv.stream.antithetic)
        
    def testFromParametersWrongKind(self):
        "Test: from_parameters() with a parameter set of another kind raises"
        pset = ParameterSet(DistributionKind.EXPONENTIAL)
        self.assertRaises(SimDomainError, NormalRV.from_parameters, pset)
        
    def testGetParametersSnapshot(self):
        "Test: changing the set from get_parameters() does not change the random variable"
        rv = NormalRV(1.0, 2.0)
        pset = rv.get_parameters()
        pset.change_double_parameter('mean', 5.0)
        self.assertEqual(rv.mean, 1.0)
        
        
class ParameterValidationTests(RandomVariableTestBase):
    "Tests that invalid constructor parameters raise"
    def testInvalidParameters(self):
        "Test: constructors with invalid parameters raise SimDomainError"
        invalid = (
            (BernoulliRV, dict(prob_of_success=1.2)),
            (BinomialRV, dict(prob_of_success=0.5, num_trials=0)),
            (PoissonRV, dict(mean=-1.0)),
            (DUniformRV, dict(minimum=3, maximum=2)),
            (GeometricRV, dict(prob_of_success=0.0)),
            (NegativeBinomialRV, dict(prob_of_success=0.5, num_successes=0.0)),
            (DEmpiricalRV, dict(values=(1.0, 2.0), cdf=(0.3, 0.9))),
            (EmpiricalRV, dict(population=())),
            (UniformRV, dict(minimum=3.0, maximum=3.0)),
            (NormalRV, dict(mean=0.0, variance=0.0)),
            (LognormalRV, dict(mean=-1.0, variance=1.0)),
            (ExponentialRV, dict(mean=0.0)),
            (WeibullRV, dict(shape=-1.0, scale=1.0)),
            (GammaRV, dict(shape=1.0, scale=0.0)),
            (TriangularRV, dict(minimum=0.0, mode=-1.0, maximum=1.0)),
            (LaplaceRV, dict(mean=0.0, scale=0.0)),
            (ChiSquaredRV, dict(dof=0.0)),
            (BetaRV, dict(alpha1=0.0, alpha2=1.0)),
            (GeneralizedBetaRV, dict(alpha1=1.0, alpha2=1.0, minimum=2.0,
                                     maximum=1.0)),
            (JohnsonBRV, dict(alpha1=0.0, alpha2=-1.0)),
            (PearsonType6RV, dict(alpha1=1.0, alpha2=1.0, beta=-2.0)),
            (AR1NormalRV, dict(correlation=1.5)),
            )
        for rvclass, kwargs in invalid:
            with self.assertRaises(SimDomainError, msg=rvclass.__name__):
                rvclass(**kwargs)
                
    def testInvalidGammaAlgorithm(self):
        "Test: GammaRV with an invalid algorithm raises"
        self.assertRaises(SimDomainError, GammaRV, 2.0, 1.0, algorithm='fast')
        
        
class DistributionTests(RandomVariableTestBase):
    "Tests of sample means and frequencies for selected distributions"
    def testNormalMean(self):
        "Test: mean of 100000 Normal(10, 4) samples is within 4 standard errors of 10"
        rv = NormalRV(10.0, 4.0)
        values = rv.sample_n(100000)
        self.assertMean(values, 10.0)
        self.assertAlmostEqual(np.var(values, ddof=1), 4.0, delta=0.1)
        
    def testDEmpiricalFrequencies(self):
        "Test: DEmpirical(values 1,2,3; cdf 0.35,0.8,1.0) frequencies"
        rv = DEmpiricalRV((1.0, 2.0, 3.0), (0.35, 0.8, 1.0))
        freq = stats.frequencies(rv.sample_n(20000), (1.0, 2.0, 3.0))
        self.assertAlmostEqual(freq[1.0], 0.35, delta=0.015)
        self.assertAlmostEqual(freq[2.0], 0.45, delta=0.015)
        self.assertAlmostEqual(freq[3.0], 0.20, delta=0.015)
        
    def testBernoulliFrequency(self):
        "Test: Bernoulli(0.3) mean is 0.3"
        self.assertMean(BernoulliRV(0.3).sample_n(10000), 0.3)
        
    def testDUniformFrequencies(self):
        "Test: DUniform(1, 4) values are equally likely"
        freq = stats.frequencies(DUniformRV(1, 4).sample_n(20000), (1, 2, 3, 4))
        for f in freq.values():
            self.assertAlmostEqual(f, 0.25, delta=0.015)
            
    def testGammaRejectionSmallShape(self):
        "Test: Gamma(0.5, 2) by acceptance-rejection has mean 1"
        rv = GammaRV(0.5, 2.0, algorithm=GammaAlgorithm.ACCEPTANCE_REJECTION)
        self.assertMean(rv.sample_n(20000), 1.0)
        
    def testGammaRejectionLargeShape(self):
        "Test: Gamma(5, 2) by acceptance-rejection has mean 10"
        rv = GammaRV(5.0, 2.0, algorithm=GammaAlgorithm.ACCEPTANCE_REJECTION)
        self.assertMean(rv.sample_n(20000), 10.0)
        
    def testGammaAlgorithmCarriedOver(self):
        "Test: new instances of a GammaRV use the same algorithm"
        rv = GammaRV(5.0, 2.0, algorithm=GammaAlgorithm.ACCEPTANCE_REJECTION)
        self.assertIs(rv.new_instance().algorithm,
                      GammaAlgorithm.ACCEPTANCE_REJECTION)
        self.assertIs(rv.new_antithetic_instance().algorithm,
                      GammaAlgorithm.ACCEPTANCE_REJECTION)
        
    def testLognormalMean(self):
        "Test: Lognormal(2, 3) mean is 2"
        self.assertMean(LognormalRV(2.0, 3.0).sample_n(40000), 2.0)
        
    def testConstant(self):
        "Test: ConstantRV always returns its value and draws no deviates"
        stream = simrandom.rn_stream(1)
        rv = ConstantRV(3.25, stream=stream)
        self.assertEqual(set(rv.sample_n(10)), {3.25})
        self.assertTrue(math.isnan(stream.previous_u))
        
    def testEmpiricalSelectsPopulation(self):
        "Test: EmpiricalRV values are drawn from the population"
        population = (1.5, 2.5, 9.0)
        values = set(EmpiricalRV(population).sample_n(500))
        self.assertEqual(values, set(population))
        
    def testArrayPropertiesAreLists(self):
        "Test: DEmpirical and Empirical array properties are lists"
        rv = DEmpiricalRV((1.0, 2.0), (0.5, 1.0))
        self.assertEqual(rv.values, [1.0, 2.0])
        self.assertEqual(rv.cdf, [0.5, 1.0])
        self.assertEqual(EmpiricalRV((3.0,)).population, [3.0])
        
        
class AR1NormalTests(RandomVariableTestBase):
    "Tests for the AR1NormalRV autoregressive process"
    def testMarginalMoments(self):
        "Test: AR1 process values have the marginal mean and variance"
        rv = AR1NormalRV(5.0, 4.0, 0.6)
        values = rv.sample_n(50000)
        self.assertAlmostEqual(np.mean(values), 5.0, delta=0.1)
        self.assertAlmostEqual(np.var(values), 4.0, delta=0.2)
        
    def testLagOneCorrelation(self):
        "Test: AR1 lag-1 sample correlation is near the specified correlation"
        rv = AR1NormalRV(0.0, 1.0, 0.7)
        values = rv.sample_n(50000)
        r = np.corrcoef(values[:-1], values[1:])[0, 1]
        self.assertAlmostEqual(r, 0.7, delta=0.02)
        
    def testZeroCorrelation(self):
        "Test: AR1 with zero correlation is an independent normal sequence"
        stream = simrandom.rn_stream(1)
        ar1 = AR1NormalRV(2.0, 9.0, 0.0, stream=stream)
        values1 = list(ar1.sample_n(10))
        stream.reset_start_stream()
        normal = NormalRV(2.0, 9.0, stream=stream)
        for x, y in zip(values1, normal.sample_n(10)):
            self.assertAlmostEqual(x, y, places=10)
            
    def testUnitCorrelation(self):
        "Test: AR1 with correlation 1 repeats its first value"
        rv = AR1NormalRV(0.0, 1.0, 1.0)
        x = rv.sample()
        for _ in range(5):
            self.assertEqual(rv.sample(), x)
            
    def testResetRestartsProcess(self):
        "Test: reset_start_stream() restarts the process as well as the stream"
        rv = AR1NormalRV(0.0, 1.0, 0.9)
        values1 = list(rv.sample_n(10))
        rv.reset_start_stream()
        self.assertEqual(list(rv.sample_n(10)), values1)
        
    def testNewInstanceRestartsProcess(self):
        "Test: a new instance starts its own process"
        stream = simrandom.rn_stream(1)
        rv = AR1NormalRV(0.0, 1.0, 0.9, stream=stream)
        values1 = list(rv.sample_n(10))
        stream.reset_start_stream()
        self.assertEqual(list(rv.new_instance(stream).sample_n(10)), values1)
        
        
def makeTestSuite():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()
    suite.addTest(loader.loadTestsFromTestCase(AllKindsTests))
    suite.addTest(loader.loadTestsFromTestCase(RandomVariableBaseTests))
    suite.addTest(loader.loadTestsFromTestCase(ParameterValidationTests))
    suite.addTest(loader.loadTestsFromTestCase(DistributionTests))
    suite.addTest(loader.loadTestsFromTestCase(AR1NormalTests))
    return suite


if __name__ == '__main__':
    unittest.main()
