"""
sigframe - framing, short-time spectral analysis/synthesis and mel projection
on numpy arrays.
"""

from .dsp_core import *  # noqa: F401,F403
from .dsp_core import __all__

__version__ = '0.1.0'
