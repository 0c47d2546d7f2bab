"""
DSP Core Module - framing, STFT/ISTFT and mel projection

Modules:
    - framing: as_windowed (frame extraction) and overlap_and_add
    - stft: Short-Time Fourier Transform and its inverse
    - mel: mel filterbank and STFT-to-mel projection
    - fft: numba-compiled FFT/IFFT and the DFT frequency axis
    - windows: window generators
    - config: typed per-operation configuration
"""

from .errors import ArgumentError, ConfigurationError
from .config import (
    FrameConfig,
    OverlapAddConfig,
    STFTConfig,
    ISTFTConfig,
    MelConfig,
    load_config,
)
from .fft import fft, ifft, fft_frequencies, next_power_of_two
from .windows import (
    get_window,
    rectangular,
    hann,
    hamming,
    blackman,
    bartlett,
    triangular,
    kaiser,
)
from .framing import as_windowed, overlap_and_add
from .stft import stft, istft, istft_frames, scaling_factor
from .mel import mel_filters, stft_to_mel, hz_to_mel, mel_to_hz

__all__ = [
    # Errors
    'ArgumentError',
    'ConfigurationError',
    # Configuration
    'FrameConfig',
    'OverlapAddConfig',
    'STFTConfig',
    'ISTFTConfig',
    'MelConfig',
    'load_config',
    # FFT
    'fft',
    'ifft',
    'fft_frequencies',
    'next_power_of_two',
    # Windows
    'get_window',
    'rectangular',
    'hann',
    'hamming',
    'blackman',
    'bartlett',
    'triangular',
    'kaiser',
    # Framing
    'as_windowed',
    'overlap_and_add',
    # STFT
    'stft',
    'istft',
    'istft_frames',
    'scaling_factor',
    # Mel
    'mel_filters',
    'stft_to_mel',
    'hz_to_mel',
    'mel_to_hz',
]
