#===============================================================================
# MODULE simexception_test
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Unit tests for the simexception module
#===============================================================================
import os
import warnings
import unittest, logging

import simvariate
from simvariate.core.simexception import (SimException, SimError,
                                          SimDomainError, SimLookupError,
                                          SimConvergenceError)
from simvariate.core.simlogging import SimLogging


class SimErrorTests(unittest.TestCase):
    "Tests for SimError and its subclasses"
    def setUp(self):
        SimLogging.set_level(logging.WARN)

    def testFormattedDescription(self):
        "Test: str() of a SimError holds the name and the formatted description"
        e = SimError("Test Error", "Value {0} is not in {1}", 3, 'range')
        self.assertEqual(str(e),
                         'SimException Error (Test Error): Value 3 is not in range')

    def testMissingDescriptionArgs(self):
        "Test: a description with too few arguments is kept unformatted"
        e = SimError("Test Error", "Value {0} and {1}", 3)
        self.assertIn("Insufficient number of description parameters", str(e))

    def testSubclasses(self):
        "Test: the domain, lookup and convergence errors are SimErrors"
        for cls in (SimDomainError, SimLookupError, SimConvergenceError):
            self.assertTrue(issubclass(cls, SimError))
            self.assertTrue(issubclass(cls, SimException))
        self.assertTrue(issubclass(SimLookupError, KeyError))

    def testLookupErrorStr(self):
        "Test: str() of a SimLookupError is not a repr of its args"
        e = SimLookupError("Lookup", "No parameter named {0}", 'scale')
        self.assertEqual(str(e),
                         'SimException Error (Lookup): No parameter named scale')


class SourceWarningTests(unittest.TestCase):
    "Tests that package sources compile cleanly"
    def testNoCompileWarnings(self):
        "Test: no package module raises a warning (e.g. invalid escape) when compiled"
        package_dir = os.path.dirname(simvariate.__file__)
        for dirpath, _, filenames in os.walk(package_dir):
            for filename in filenames:
                if not filename.endswith('.py'):
                    continue
                path = os.path.join(dirpath, filename)
                with open(path, encoding='utf-8') as f:
                    source = f.read()
                with warnings.catch_warnings():
                    warnings.simplefilter('error')
                    try:
                        compile(source, path, 'exec')
                    except (SyntaxError, Warning) as e:
                        self.fail("{0}: {1}".format(path, e))


def makeTestSuite():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()
    suite.addTest(loader.loadTestsFromTestCase(SimErrorTests))
    suite.addTest(loader.loadTestsFromTestCase(SourceWarningTests))
    return suite


if __name__ == '__main__':
    unittest.main()
