#===============================================================================
# MODULE simrandom
#
# Copyright (C) 2024 Howard Klein - All Rights Reserved
#
# Defines the uniform random number streams consumed by variate generation:
# the RNStream class, the RNStreamProvider class and a set of module-level
# functions that manage a default provider for the current simulation run.
#
# Variate generation only needs a source of uniform(0,1) deviates; any
# object that implements the UniformStream contract below can be bound to
# a random variable:
#
#    next_uniform() / randU01()  next uniform deviate, in the open interval (0,1)
#    rand_int(lo, hi)            uniformly distributed integer in [lo, hi]
#    new_substream()             start the next substream of this stream
#    new_antithetic_instance()   a new stream, positioned at the start of
#                                this stream, whose deviates are 1-u
#    stream_identity()           integer identity of the stream
#
# RNStream implements that contract using NumPy's PCG64DXSM bit generator.
# This generator is reasonably efficient, has a sufficiently long period
# (2**128) and a very fast jumped() implementation, which is our technique
# for generating multiple independent streams:
#
# Stream n for run r is the base bit generator jumped
# (r-1) * streams_per_run + (n-1) times. Each jump advances the generator
# by roughly 2**127 steps, so streams never overlap in practice. Within a
# stream, substream k starts k * 2**64 steps beyond the start of the stream
# (via the bit generator's advance() method), so that substreams are long
# enough for any run while staying well clear of the next stream.
#
# Stream one is the default stream, used by sampling functions that are not
# passed a stream; next_stream() starts at stream two. If a run asks
# next_stream() for more than streams_per_run streams, the extra streams are
# taken from jumps beyond those of all configured runs, so they remain
# independent of every other run's streams.
#
# The number of streams per run and the maximum number of runs are taken
# from the [SimRandom] configuration section.
#===============================================================================
__all__ = ['RNStream', 'RNStreamProvider', 'initialize', 'default_provider',
           'next_stream', 'rn_stream', 'default_stream', 'max_streams',
           'max_run_number', 'min_run_number']

import copy
import numpy as np

from simvariate.core.simexception import SimError, SimDomainError
from simvariate.core.simlogging import SimLogging
from simvariate.core.apidoc import apidoc, apidocskip
import simvariate.core.configuration as simconfig

logger = SimLogging.get_logger(__name__)

# Base seed generated via a one-time offline call to secrets.randbits(), per
# https://numpy.org/doc/stable/reference/random/index.html#recommend-secrets-randbits
_BASE_SEED = 339697402671268427564149969060011333618

# Distance (in bit generator steps) between the start of consecutive
# substreams of the same stream
_SUBSTREAM_ADVANCE = 2**64

_RNG_INITIALIZATION_ERROR = "Random Number Stream Initialization Error"
_RAND_STREAM_ERROR = "Invalid Random Number Stream Request"


@apidoc
class RNStream(object):
    """
    A uniform random number stream, divided into substreams, backed by a
    NumPy :class:`numpy.random.Generator`. Streams are normally obtained
    from an :class:`RNStreamProvider` (or the module-level
    :func:`rn_stream` and :func:`next_stream` functions) rather than
    created directly.
    
    :param bit_generator: Bit generator positioned at the start of the
                          stream. The stream keeps its own copy.
    :type bit_generator:  :class:`numpy.random.PCG64DXSM`
    
    :param identity:      Integer identity of the stream
    :type identity:       `int`
    
    :param name:          Optional stream name
    :type name:           `str` or None
    
    :param antithetic:    If True, the stream returns 1-u in place of
                          each uniform deviate u.
    :type antithetic:     `bool`
    
    """
    __slots__ = ('_start_bit_generator', '_identity', '_name', '_antithetic',
                 '_substream', '_generator', '_prev_u')
    
    def __init__(self, bit_generator, identity, name=None, antithetic=False):
        self._start_bit_generator = copy.deepcopy(bit_generator)
        self._identity = identity
        self._name = name if name else 'RNStream_' + str(identity)
        self._antithetic = bool(antithetic)
        self._prev_u = float('nan')
        self._position(0)
        
    def _position(self, substream):
        """
        Create a fresh generator positioned at the start of the specified
        substream.
        """
        bg = copy.deepcopy(self._start_bit_generator)
        if substream:
            bg.advance(substream * _SUBSTREAM_ADVANCE)
        self._generator = np.random.Generator(bg)
        self._substream = substream
        
    @property
    def name(self):
        return self._name
    
    @property
    def antithetic(self):
        """
        True if the stream is producing antithetic (1-u) deviates. May be
        set, which affects subsequent deviates only.
        """
        return self._antithetic
    
    @antithetic.setter
    def antithetic(self, flag):
        self._antithetic = bool(flag)
        
    @property
    def substream_number(self):
        """
        The zero-based index of the stream's current substream
        """
        return self._substream
    
    @property
    def previous_u(self):
        """
        The most recently returned uniform deviate, or NaN if none
        """
        return self._prev_u
    
    @property
    def generator(self):
        """
        The underlying NumPy generator, for client code that needs to
        sample a distribution directly. Note that deviates drawn this way
        do not honor the antithetic option.
        """
        return self._generator
    
    def next_uniform(self):
        """
        Return the next uniform deviate in the open interval (0,1)
        
        :return: Uniform(0,1) deviate
        :rtype:  `float`
        
        """
        u = self._generator.random()
        while u == 0.0:
            u = self._generator.random()
        if self._antithetic:
            u = 1.0 - u
        self._prev_u = u
        return u
    
    randU01 = next_uniform
        
    def rand_int(self, lo, hi):
        """
        Return an integer uniformly distributed over the closed interval
        [lo, hi], computed from one uniform deviate (so that antithetic
        streams produce antithetic integers).
        
        :param lo: Lower bound (inclusive)
        :type lo:  `int`
        
        :param hi: Upper bound (inclusive), must be >= lo
        :type hi:  `int`
        
        """
        if lo > hi:
            msg = "rand_int() lower bound {0} is greater than upper bound {1}"
            raise SimDomainError(_RAND_STREAM_ERROR, msg, lo, hi)
        return lo + int(self.next_uniform() * (hi - lo + 1))
    
    randInt = rand_int
    
    def reset_start_stream(self):
        """
        Position the stream at the start of its first substream.
        """
        self._position(0)
        
    def reset_start_substream(self):
        """
        Position the stream at the start of its current substream.
        """
        self._position(self._substream)
        
    def advance_to_next_substream(self):
        """
        Position the stream at the start of its next substream.
        """
        self._position(self._substream + 1)
        
    def new_substream(self):
        """
        Start the next substream; identical to
        :meth:`advance_to_next_substream`.
        """
        self.advance_to_next_substream()
        
    def new_antithetic_instance(self):
        """
        Return a new stream with the same identity, positioned at the start
        of this stream, that produces the antithetic deviates of this stream.
        """
        return RNStream(self._start_bit_generator, self._identity,
                        self._name + '_A', not self._antithetic)
    
    def stream_identity(self):
        """
        Return the integer identity of the stream
        """
        return self._identity
    
    def __repr__(self):
        return 'RNStream({0}, id={1}, substream={2}, antithetic={3})'.format(
            self._name, self._identity, self._substream, self._antithetic)
    

@apidoc
class RNStreamProvider(object):
    """
    Provides the independent random number streams for a single simulation
    run. Streams are numbered 1 through ``streams_per_run`` (and beyond,
    via :meth:`next_stream`) and are created lazily, on first request; the
    same stream number always yields the same stream object.
    
    :param run_number:      Run (replication) number, in range
                            1 - ``max_run_number``
    :type run_number:       `int`
    
    :param streams_per_run: Number of streams available. Defaults to the
                            [SimRandom] StreamsPerRun setting.
    :type streams_per_run:  `int` or None
    
    :param max_run_number:  Maximum valid run number. Defaults to the
                            [SimRandom] MaxReplications setting.
    :type max_run_number:   `int` or None
    
    :param seed:            Seed for the base bit generator
    :type seed:             `int`
    
    """
    def __init__(self, run_number=1, streams_per_run=None,
                 max_run_number=None, seed=_BASE_SEED):
        if streams_per_run is None:
            streams_per_run = simconfig.get_PRNstreams_per_run()
        if max_run_number is None:
            max_run_number = simconfig.get_max_replications()
            
        if run_number <= 0:
            msg = "Requested run number ({0}) must be greater than zero"
            raise SimError(_RNG_INITIALIZATION_ERROR, msg, run_number)
        if run_number > max_run_number:
            msg = "Requested run number {0} exceeds the configured maximum number of runs ({1})"
            raise SimError(_RNG_INITIALIZATION_ERROR, msg, run_number,
                           max_run_number)
        if streams_per_run <= 0:
            msg = "Streams per run ({0}) must be greater than zero"
            raise SimError(_RNG_INITIALIZATION_ERROR, msg, streams_per_run)
            
        self._run_number = run_number
        self._streams_per_run = streams_per_run
        self._max_run_number = max_run_number
        self._base_bit_generator = np.random.PCG64DXSM(seed=seed)
        self._streams = {}
        # stream one is the default stream; next_stream() never hands it out
        self._last_stream_number = 1
        logger.info("Random number stream provider created for run %d (%d streams)",
                    run_number, streams_per_run)
        
    @property
    def run_number(self):
        return self._run_number
    
    @property
    def max_streams(self):
        return self._streams_per_run
    
    def _jumps(self, stream_number):
        """
        Return the number of jumps from the base bit generator to the start
        of a stream. Streams 1 - max_streams of all runs come first; the
        streams beyond max_streams, which only next_stream() provides, are
        interleaved by run after those.
        """
        if stream_number <= self._streams_per_run:
            return (self._run_number - 1) * self._streams_per_run + stream_number - 1
        extra = stream_number - self._streams_per_run - 1
        return (self._max_run_number * self._streams_per_run
                + extra * self._max_run_number + self._run_number - 1)
    
    def _stream(self, stream_number):
        stream = self._streams.get(stream_number)
        if stream is None:
            jumps = self._jumps(stream_number)
            bg = self._base_bit_generator.jumped(jumps) if jumps else self._base_bit_generator
            stream = RNStream(bg, jumps + 1)
            self._streams[stream_number] = stream
        self._last_stream_number = max(self._last_stream_number, stream_number)
        return stream
    
    def rn_stream(self, stream_number):
        """
        Return the stream with the specified number, creating it if it has
        not been requested before.
        
        :param stream_number: Stream number in range 1 - :attr:`max_streams`
        :type stream_number:  `int`
        
        :return: The requested stream
        :rtype:  :class:`RNStream`
        
        """
        if stream_number <= 0 or stream_number > self._streams_per_run:
            msg = "Requested stream number ({0}) must be in range 1 - {1}"
            raise SimError(_RAND_STREAM_ERROR, msg, stream_number,
                           self._streams_per_run)
        return self._stream(stream_number)
    
    def next_stream(self):
        """
        Return the next stream that has not yet been provided (the stream
        number one greater than the highest number provided so far, and
        never the default stream). Streams beyond :attr:`max_streams`
        are still provided, with a warning when the first of them is.
        """
        stream_number = self._last_stream_number + 1
        if stream_number == self._streams_per_run + 1:
            logger.warning("Run %d has provided all %d configured streams; additional streams are outside the configured range",
                           self._run_number, self._streams_per_run)
        return self._stream(stream_number)
    
    def default_stream(self):
        """
        Return the default stream, stream number one.
        """
        return self.rn_stream(1)
    
    def stream_number(self, stream):
        """
        Return the number of a stream provided by this provider, or None
        if the stream did not come from this provider.
        """
        for n, s in self._streams.items():
            if s is stream:
                return n
        return None
    
    def provided_streams(self):
        """
        Return the streams provided so far, ordered by stream number.
        """
        return [self._streams[n] for n in sorted(self._streams)]
    
    def reset_all(self):
        """
        Reset every provided stream to the start of its first substream.
        """
        for stream in self._streams.values():
            stream.reset_start_stream()
            
    def advance_all_to_next_substream(self):
        """
        Advance every provided stream to its next substream.
        """
        for stream in self._streams.values():
            stream.advance_to_next_substream()
            
    def set_all_antithetic(self, flag):
        """
        Set the antithetic option on every provided stream.
        """
        for stream in self._streams.values():
            stream.antithetic = flag
            

# The provider for the current run
_provider = None

@apidoc        
def max_streams():
    """
    The number of separate pseudo-random-number streams supported for
    each run.
    
    :return: The (maximum) number of supported separate/independent streams
    :rtype:  `int`
    
    """
    return simconfig.get_PRNstreams_per_run()
        
@apidoc        
def max_run_number():
    """
    The maximum run number supported, as configured.
    
    :return: maximum supported run number
    :rtype:  `int`
    
    """
    return simconfig.get_max_replications()

@apidoc        
def min_run_number():
    """
    The minimum run number supported - always 1
    
    :return: minimum supported run number
    :rtype:  `int`
    
    """
    return 1

@apidoc
def initialize(run_number=1):
    """
    Create the stream provider for a specified run, replacing any previous
    provider. Streams obtained before initialization are not affected.
    
    :param run_number: The run number to initialize random number streams
                       for. Must be in range 1 - :func:`max_run_number`
    :type run_number:  `int`
    
    :return: The new provider
    :rtype:  :class:`RNStreamProvider`
    
    """
    global _provider
    logger.info("Initializing random number streams for run %d", run_number)
    _provider = RNStreamProvider(run_number)
    return _provider

@apidoc
def default_provider():
    """
    Return the provider for the current run, initializing run 1 if
    :func:`initialize` has not been called.
    """
    if _provider is None:
        initialize(1)
    return _provider

@apidoc
def next_stream():
    """
    Return the next unused stream from the current run's provider.
    """
    return default_provider().next_stream()

@apidoc
def rn_stream(stream_number):
    """
    Return the specified stream from the current run's provider.
    """
    return default_provider().rn_stream(stream_number)

@apidoc
def default_stream():
    """
    Return stream number one from the current run's provider.
    """
    return default_provider().default_stream()
