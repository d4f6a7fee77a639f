#===============================================================================
# MODULE numerics_test
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Unit tests for the iterative, continuedfraction and rootfinder modules
#===============================================================================
import math
import unittest, logging

from simvariate.core import SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.numenv import NumericEnvironment
from simvariate.numerics.iterative import iterate
from simvariate.numerics.continuedfraction import ContinuedFraction
from simvariate.numerics.rootfinder import (BisectionRootFinder,
                                            RootFinderState, has_root,
                                            find_interval)

_GOLDEN_RATIO = (1.0 + math.sqrt(5.0)) / 2.0


def _e_factors(n):
    # e = 2 + 1/(1 + 1/(2 + 2/(3 + 3/(4 + ...))))
    return max(1.0, n - 1.0), float(n)


def _cubic(x):
    return x * x * x + 4.0 * x * x - 10.0


class IterateTests(unittest.TestCase):
    "Tests for the iterate() function"
    def setUp(self):
        SimLogging.set_level(logging.WARN)
        
    def testConverges(self):
        "Test: iterate() halving a precision converges"
        state = {'p': 1.0}
        def step():
            state['p'] /= 2.0
            return state['p']
        result = iterate(step, desired_precision=0.01)
        self.assertTrue(result.converged)
        self.assertEqual(result.iterations, 7)
        
    def testMaxIterations(self):
        "Test: iterate() stops at max_iterations without converging"
        result = iterate(lambda: 1.0, desired_precision=0.01, max_iterations=5)
        self.assertFalse(result.converged)
        self.assertEqual(result.iterations, 5)
        
    def testConvergencePredicate(self):
        "Test: iterate() with a custom convergence predicate"
        counter = iter(range(100))
        result = iterate(lambda: next(counter), has_converged=lambda p: p >= 3)
        self.assertTrue(result.converged)
        self.assertEqual(result.precision, 3)
        
    def testInvalidMaxIterations(self):
        "Test: iterate() with max_iterations <= 0 raises"
        self.assertRaises(SimDomainError, iterate, lambda: 0.0, None, 0.1, 0)
        
    def testInvalidPrecision(self):
        "Test: iterate() with desired_precision <= 0 raises"
        self.assertRaises(SimDomainError, iterate, lambda: 0.0, None, 0.0)
        
        
class ContinuedFractionTests(unittest.TestCase):
    "Tests for class ContinuedFraction"
    def setUp(self):
        SimLogging.set_level(logging.WARN)
        self.env = NumericEnvironment()
        
    def testGoldenRatio(self):
        "Test: 1 + 1/(1 + 1/(1 + ...)) evaluates to the golden ratio"
        cf = ContinuedFraction(lambda n: (1.0, 1.0), 1.0)
        result = cf.evaluate()
        self.assertTrue(result.converged)
        self.assertAlmostEqual(result.value, _GOLDEN_RATIO, delta=1.0e-7)
        
    def testE(self):
        "Test: continued fraction for e converges within default precision"
        result = ContinuedFraction(_e_factors, 2.0).evaluate()
        self.assertTrue(result.converged)
        self.assertLess(abs(result.value - math.e) / math.e,
                        self.env.default_precision)
        
    def testInverseE(self):
        "Test: reciprocal of the continued fraction for e is e**-1"
        result = ContinuedFraction(_e_factors, 2.0).evaluate()
        self.assertAlmostEqual(1.0 / result.value, math.exp(-1.0), places=7)
        
    def testZeroInitialValue(self):
        "Test: zero leading term is guarded; evaluates e - 2"
        result = ContinuedFraction(_e_factors, 0.0).evaluate()
        self.assertTrue(result.converged)
        self.assertAlmostEqual(result.value, math.e - 2.0, places=7)
        
    def testNotConverged(self):
        "Test: iteration limit reached returns estimate, converged False"
        cf = ContinuedFraction(lambda n: (1.0, 1.0), 1.0, max_iterations=3)
        result = cf.evaluate()
        self.assertFalse(result.converged)
        self.assertEqual(result.iterations, 3)
        self.assertAlmostEqual(result.value, _GOLDEN_RATIO, delta=0.1)
        
    def testReevaluate(self):
        "Test: evaluate() may be called repeatedly with the same result"
        cf = ContinuedFraction(_e_factors, 2.0)
        self.assertEqual(cf.evaluate().value, cf.evaluate().value)
        
    def testInvalidPrecision(self):
        "Test: desired precision <= 0 raises"
        self.assertRaises(SimDomainError, ContinuedFraction, _e_factors, 2.0,
                          -1.0)
        
    def testInvalidMaxIterations(self):
        "Test: max iterations <= 0 raises"
        self.assertRaises(SimDomainError, ContinuedFraction, _e_factors, 2.0,
                          None, 0)
        
        
class BisectionRootFinderTests(unittest.TestCase):
    "Tests for class BisectionRootFinder"
    def setUp(self):
        SimLogging.set_level(logging.WARN)
        
    def testCubicRoot(self):
        "Test: root of x**3 + 4x**2 - 10 on [1,2] is 1.3652300134"
        finder = BisectionRootFinder(_cubic, 1.0, 2.0)
        self.assertEqual(finder.state, RootFinderState.INITIALIZED)
        result = finder.evaluate()
        self.assertTrue(result.converged)
        self.assertLessEqual(result.iterations, 100)
        self.assertAlmostEqual(result.root, 1.3652300134, places=7)
        self.assertEqual(finder.state, RootFinderState.CONVERGED)
        
    def testIntervalShrinks(self):
        "Test: final interval brackets the root"
        finder = BisectionRootFinder(_cubic, 1.0, 2.0)
        finder.evaluate()
        lower, upper = finder.interval
        self.assertLessEqual(lower, 1.3652300134)
        self.assertGreaterEqual(upper, 1.3652300134)
        
    def testDecreasingFunction(self):
        "Test: root of a decreasing function"
        result = BisectionRootFinder(lambda x: 2.0 - x, 0.0, 5.0).evaluate()
        self.assertAlmostEqual(result.root, 2.0, places=7)
        
    def testRootAtEndpoint(self):
        "Test: root at an interval endpoint is found immediately"
        result = BisectionRootFinder(lambda x: x - 1.0, 1.0, 3.0).evaluate()
        self.assertTrue(result.converged)
        self.assertEqual(result.root, 1.0)
        self.assertEqual(result.iterations, 0)
        
    def testMaxIterationsReached(self):
        "Test: iteration limit is reported, not raised"
        finder = BisectionRootFinder(_cubic, 1.0, 2.0, max_iterations=5)
        result = finder.evaluate()
        self.assertFalse(result.converged)
        self.assertEqual(result.iterations, 5)
        self.assertEqual(finder.state, RootFinderState.MAX_ITERATIONS_REACHED)
        self.assertAlmostEqual(result.root, 1.3652300134, delta=1.0 / 32)
        
    def testNoSignChange(self):
        "Test: interval without a sign change raises"
        self.assertRaises(SimDomainError, BisectionRootFinder, _cubic, 2.0, 3.0)
        
    def testInvertedInterval(self):
        "Test: lower >= upper raises"
        self.assertRaises(SimDomainError, BisectionRootFinder, _cubic, 2.0, 1.0)
        
    def testInitialPointOutsideInterval(self):
        "Test: initial point outside the interval raises"
        self.assertRaises(SimDomainError, BisectionRootFinder, _cubic, 1.0,
                          2.0, 2.5)
        
    def testSetInterval(self):
        "Test: set_interval() resets the finder"
        finder = BisectionRootFinder(lambda x: x * x - 2.0, 1.0, 2.0)
        finder.evaluate()
        finder.set_interval(-2.0, -1.0)
        self.assertEqual(finder.state, RootFinderState.INITIALIZED)
        self.assertAlmostEqual(finder.evaluate().root, -math.sqrt(2.0), places=7)
        
    def testHasRoot(self):
        "Test: has_root() detects a sign change"
        self.assertTrue(has_root(_cubic, 1.0, 2.0))
        self.assertFalse(has_root(_cubic, 2.0, 3.0))
        
    def testFindInterval(self):
        "Test: find_interval() expands to bracket a root"
        interval = find_interval(_cubic, (2.0, 3.0))
        self.assertIsNotNone(interval)
        self.assertTrue(has_root(_cubic, *interval))
        
    def testFindIntervalNoRoot(self):
        "Test: find_interval() returns None for a function with no root"
        self.assertIsNone(find_interval(lambda x: x * x + 1.0, (1.0, 2.0),
                                        max_tries=10))
        
        
def makeTestSuite():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()
    suite.addTest(loader.loadTestsFromTestCase(IterateTests))
    suite.addTest(loader.loadTestsFromTestCase(ContinuedFractionTests))
    suite.addTest(loader.loadTestsFromTestCase(BisectionRootFinderTests))
    return suite


if __name__ == '__main__':
    unittest.main()
