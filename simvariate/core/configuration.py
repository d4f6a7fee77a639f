#===============================================================================
# MODULE configuration
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Package configuration settings. Client code calls the module-level
# get_*() accessors, which read from a single SimConfigParser created at
# import; that parser reads its .ini files the first time any setting is
# requested, so a model script path set before then determines which
# script-specific files are read.
#===============================================================================
import sys, os, configparser, logging
from simvariate.core.simexception import SimError

_CONFIG_EXTENSION = '.ini'
_SIMVARIATE_CFG_BASENAME = 'simvariate.ini'
_MODEL_SCRIPT_ENV_VARNAME = 'SIMVARIATE_MODEL_SCRIPT'

# Configuration .ini file section names
_LOGGING = 'Logging'
_SIM_RANDOM = 'SimRandom'
_NUMERICS = 'Numerics'
_VARIATES = 'Variates'

_ERROR_NAME = 'SimConfiguration Error'

# simlogging imports this module, so log through the standard library
_logger = logging.getLogger(__name__)


class SimConfigParser(configparser.ConfigParser):
    """
    ConfigParser whose typed getters raise :class:`~.simexception.SimError`
    for missing, malformed or out-of-range settings. :meth:`getint` and
    :meth:`getfloat` accept optional ``minvalue``/``maxvalue`` bounds, and
    :meth:`getstring` checks a value against a set of allowed strings.

    Files are read by :meth:`read_files` on the first setting request.
    Later files override earlier ones:

      1. simvariate.ini in the package installation directory
      2. simvariate.ini in the working directory
      3. <script>.ini next to the model script <script>.py
      4. <script>.ini in the working directory

    The model script path is taken from the SIMVARIATE_MODEL_SCRIPT
    environment variable, else sys.argv[0]; :meth:`set_modelscript_path`
    can replace it until the files are read.
    """
    def __init__(self):
        super().__init__()
        self._initialized = False
        self._modelscript_path = os.environ.get(_MODEL_SCRIPT_ENV_VARNAME,
                                                sys.argv[0])

    def _initialize(self):
        if not self._initialized:
            self._initialized = True
            self.read_files()

    @property
    def initialized(self):
        return self._initialized

    def set_modelscript_path(self, path):
        if self._initialized:
            msg = "Model script path ({0}) must be set before any configuration setting is read"
            raise SimError(_ERROR_NAME, msg, path)
        self._modelscript_path = path

    def _read_setting(self, reader, expected, section, option, **kwargs):
        """
        Return reader(section, option, **kwargs), converting conversion
        and lookup failures to SimError
        """
        self._initialize()
        try:
            return reader(section, option, **kwargs)
        except ValueError:
            rawvalue = self.get(section, option, raw=True, fallback=None)
            msg = "Configuration setting [{0}] {1} ({2}) must be {3}"
            raise SimError(_ERROR_NAME, msg, section, option, rawvalue, expected)
        except configparser.Error as e:
            msg = "Unable to read configuration setting [{0}] {1}: {2}"
            raise SimError(_ERROR_NAME, msg, section, option, e)

    @staticmethod
    def _check_bounds(section, option, value, minvalue, maxvalue):
        if minvalue is not None and value < minvalue:
            msg = "Configuration setting [{0}] {1} ({2}) is below the minimum of {3}"
            raise SimError(_ERROR_NAME, msg, section, option, value, minvalue)
        if maxvalue is not None and value > maxvalue:
            msg = "Configuration setting [{0}] {1} ({2}) is above the maximum of {3}"
            raise SimError(_ERROR_NAME, msg, section, option, value, maxvalue)
        return value

    def getint(self, section, option, minvalue=None, maxvalue=None, **kwargs):
        value = self._read_setting(super().getint, 'an integer', section,
                                   option, **kwargs)
        return self._check_bounds(section, option, value, minvalue, maxvalue)

    def getfloat(self, section, option, minvalue=None, maxvalue=None, **kwargs):
        value = self._read_setting(super().getfloat, 'a number', section,
                                   option, **kwargs)
        return self._check_bounds(section, option, value, minvalue, maxvalue)

    def getboolean(self, section, option, **kwargs):
        return self._read_setting(super().getboolean, 'true or false',
                                  section, option, **kwargs)

    def getstring(self, section, option, valid_values, **kwargs):
        """
        Return a string setting, lowercased, after checking it (case
        insensitively) against ``valid_values``
        """
        value = self._read_setting(self.get, 'a string', section, option,
                                   **kwargs)
        if value.lower() not in valid_values:
            msg = "Configuration setting [{0}] {1} ({2}) must be one of {3}"
            raise SimError(_ERROR_NAME, msg, section, option, value,
                           list(valid_values))
        return value.lower()

    def _candidate_files(self):
        install_dir = os.path.split(os.path.dirname(__file__))[0]
        cwd = os.getcwd()
        script_cfg = os.path.splitext(self._modelscript_path)[0] + _CONFIG_EXTENSION
        candidates = (os.path.join(install_dir, _SIMVARIATE_CFG_BASENAME),
                      os.path.join(cwd, _SIMVARIATE_CFG_BASENAME),
                      script_cfg,
                      os.path.join(cwd, os.path.basename(script_cfg)))
        # the same file may appear twice; read it once, at its first position
        return list(dict.fromkeys(candidates))

    def read_files(self):
        """
        Read whichever configuration files exist, in override order.
        Returns the list of files read.
        """
        cfg_files = self._candidate_files()
        try:
            files_read = self.read(cfg_files)
        except configparser.Error as e:
            msg = "Unable to parse simvariate configuration files {0}: {1}"
            raise SimError(_ERROR_NAME, msg, cfg_files, e)
        if files_read:
            _logger.info("Read configuration files: %s", files_read)
        return files_read


_config = SimConfigParser()

def set_modelscript_path(path):
    """
    Set the model script path used to find script-specific configuration
    files. Raises once any setting has been read.
    """
    _config.set_modelscript_path(path)

#===============================================================================
# Logging setting accessors
#===============================================================================
_LEVELS = {'debug': logging.DEBUG,
           'info': logging.INFO,
           'warning': logging.WARNING,
           'error': logging.ERROR,
           'critical': logging.CRITICAL}

def get_logging_enabled():
    return _config.getboolean(_LOGGING, 'enabled', fallback=True)

def get_logging_level():
    """
    Return the configured logging level as a (logging module level,
    lowercase level name) pair
    """
    levelstr = _config.getstring(_LOGGING, 'level', _LEVELS.keys(),
                                 fallback='warning')
    return _LEVELS[levelstr], levelstr

#===============================================================================
# SimRandom setting accessors
#===============================================================================
def get_PRNstreams_per_run():
    """
    Return the number of independent random number streams per run
    """
    return _config.getint(_SIM_RANDOM, 'StreamsPerRun', minvalue=1, fallback=2000)

def get_max_replications():
    """
    Return the highest supported run (replication) number
    """
    return _config.getint(_SIM_RANDOM, 'MaxReplications', minvalue=1, fallback=100)

#===============================================================================
# Numerics setting accessors
#===============================================================================
def get_max_iterations():
    """
    Return the global iteration limit for special function evaluation
    """
    return _config.getint(_NUMERICS, 'MaxIterations', minvalue=1, fallback=200)

def get_continued_fraction_iterations():
    """
    Return the default iteration limit for continued fraction evaluation
    """
    return _config.getint(_NUMERICS, 'ContinuedFractionIterations',
                          minvalue=1, fallback=100)

def get_root_finder_iterations():
    """
    Return the default iteration limit for bisection root finding
    """
    return _config.getint(_NUMERICS, 'RootFinderIterations', minvalue=1,
                          fallback=100)

def get_gamma_series_iterations():
    """
    Return the iteration limit for the incomplete gamma function series
    and continued fraction expansions
    """
    return _config.getint(_NUMERICS, 'GammaSeriesIterations', minvalue=1,
                          fallback=5000)

#===============================================================================
# Variates setting accessors
#===============================================================================
def get_rejection_soft_cap():
    """
    Return the number of rejections after which an acceptance-rejection
    sampling loop gives up.
    """
    return _config.getint(_VARIATES, 'RejectionSoftCap', minvalue=1,
                          fallback=10000000)
