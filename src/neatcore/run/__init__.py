"""
NEAT Run Package

Configuration and the driver for complete evolutionary runs.

Exported Classes:
    Config:   Run configuration, read from an INI file
    Settings: Immutable evolution parameters
    Topology: Immutable input/output interface of a population
    Trial:    Abstract base class for a complete NEAT run
"""

from neatcore.run.config import Config, Settings, Topology

__all__ = ['Config',
           'Settings',
           'Topology',
           'Trial']


def __getattr__(name):
    # The genotype and pool modules import the config module, so the trial
    # module (which imports them back) is only loaded on first access
    if name == 'Trial':
        from neatcore.run.trial import Trial
        return Trial
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
