#===============================================================================
# MODULE simlogging
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Logging setup for the simvariate package. Every package module obtains
# its logger through SimLogging.get_logger(), which places it below a single
# base logger named after the package; the base logger owns the only
# handler.
#
# The [Logging] configuration section sets the base logger level (and may
# turn logging off) when this module is first imported. Setting the
# environment variable simvariate_DISABLE_LOGGING before import also turns
# logging off; in either case get_logger() hands out NullLoggers.
#===============================================================================
__all__ = ['SimLogging']

import logging, os
from simvariate.core.apidoc import apidoc, apidocskip
import simvariate.core.configuration as simconfig

_PACKAGE = __name__.split('.')[0]
_LOG_FORMAT = '%(name)s %(levelname)s:\t%(lineno)d\t%(message)s'
_DISABLE_LOGGING_ENV_NAME = _PACKAGE + '_DISABLE_LOGGING'


def _make_base_logger():
    base = logging.getLogger(_PACKAGE)
    base.setLevel(logging.WARNING)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    base.addHandler(handler)
    return base

_baseLogger = _make_base_logger()
_disabled = bool(os.getenv(_DISABLE_LOGGING_ENV_NAME))


@apidocskip
class NullLogger(object):
    """
    Stand-in for a logging.Logger once logging is turned off. Every
    attribute lookup and every call yields the NullLogger again, so
    ``logger.info(...)`` and friends do nothing.
    """
    def __init__(self, *args, **kwargs): pass
    def __call__(self, *args, **kwargs): return self
    def __getattribute__(self, name): return self
    def __setattr__(self, name, value): pass
    def __delattr__(self, name): pass


def _package_logger_name(name):
    if name is None:
        return _PACKAGE
    if name.split('.')[0] == _PACKAGE:
        return name
    return _PACKAGE + '.' + name


@apidoc
class SimLogging(object):
    """
    Static helpers for obtaining and tuning the package's loggers.
    Typical module usage::

        logger = SimLogging.get_logger(__name__)

    """

    @staticmethod
    def get_logger(name, level=logging.NOTSET):
        """
        Return the package logger for a module name, or a NullLogger if
        logging is turned off. Names from outside the package are placed
        below the base logger.

        :param name:  Logger name, normally the calling module's __name__
        :type name:   `str`

        :param level: Initial logger level; the default (NOTSET) defers to
                      the base logger
        :type level:  `int`

        :return:      The logger
        :rtype:       `logging.Logger`

        """
        if _disabled:
            return NullLogger()
        logger = logging.getLogger(_package_logger_name(name))
        logger.setLevel(level)
        return logger

    @staticmethod
    def set_level(lvl, name=None):
        """
        Set the level of a package logger (the base logger by default)
        """
        logging.getLogger(_package_logger_name(name)).setLevel(lvl)

    @staticmethod
    def get_level(name=None):
        """
        Return the effective level of a package logger (the base logger
        by default)

        :rtype: `int`

        """
        return logging.getLogger(_package_logger_name(name)).getEffectiveLevel()

    @staticmethod
    def is_disabled():
        return _disabled

    @apidocskip
    @staticmethod
    def add_handler(dest):
        """
        Send package log output to an additional destination (anything
        with a ``write()`` method), in the package log format. Returns the
        new handler.
        """
        handler = logging.StreamHandler(dest)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        _baseLogger.addHandler(handler)
        return handler

    @apidocskip
    @staticmethod
    def remove_handler(handler):
        _baseLogger.removeHandler(handler)


def _apply_configuration():
    global _disabled
    if not simconfig.get_logging_enabled():
        _disabled = True
        return
    level, levelstr = simconfig.get_logging_level()
    _baseLogger.setLevel(level)
    _baseLogger.debug("Logging level set to %s from configuration", levelstr)

if not _disabled:
    _apply_configuration()
