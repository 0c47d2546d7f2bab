"""
Mel-scale filterbank and projection of STFT spectra onto it.

Uses the Slaney mel scale: linear below 1 kHz, logarithmic above, with the
two pieces meeting continuously at 1 kHz.
"""

from typing import Optional

import numpy as np

from ..utils.logging import get_logger
from .config import MelConfig
from .errors import ConfigurationError
from .fft import fft_frequencies

logger = get_logger(__name__)

MIN_LOG_HZ = 1000.0
LOGSTEP = np.log(6.4) / 27.0
DEFAULT_MEL_SPACING = 200.0 / 3.0

# Floor applied before log10, and dynamic range kept below each frame's peak
AMIN = 1e-10
TOP_DECADES = 8.0


def hz_to_mel(frequencies: np.ndarray, mel_frequency_spacing: float = DEFAULT_MEL_SPACING) -> np.ndarray:
    """
    Convert Hz to the Slaney mel scale.

    Below 1000 Hz: mel = f / spacing. Above: logarithmic, continuous at 1000 Hz.
    """
    frequencies = np.asarray(frequencies, dtype=np.float64)
    f_sp = mel_frequency_spacing
    min_log_mel = MIN_LOG_HZ / f_sp

    return np.where(
        frequencies < MIN_LOG_HZ,
        frequencies / f_sp,
        # maximum() only keeps log() quiet on the branch np.where discards
        min_log_mel + np.log(np.maximum(frequencies, AMIN) / MIN_LOG_HZ) / LOGSTEP
    )


def mel_to_hz(mels: np.ndarray, mel_frequency_spacing: float = DEFAULT_MEL_SPACING) -> np.ndarray:
    """Inverse of hz_to_mel()."""
    mels = np.asarray(mels, dtype=np.float64)
    f_sp = mel_frequency_spacing
    min_log_mel = MIN_LOG_HZ / f_sp

    return np.where(
        mels < min_log_mel,
        f_sp * mels,
        MIN_LOG_HZ * np.exp(LOGSTEP * (mels - min_log_mel))
    )


def mel_filters(
    fft_length: Optional[int] = None,
    mel_bins: int = 128,
    sampling_rate: Optional[float] = None,
    max_mel: float = 3016.0,
    mel_frequency_spacing: float = DEFAULT_MEL_SPACING,
    config: Optional[MelConfig] = None
) -> np.ndarray:
    """
    Weights for converting an STFT spectrum to the mel scale.

    mel_bins + 2 breakpoints are spaced evenly on the mel axis from 0 to
    max_mel / mel_frequency_spacing. Filter m is a triangle rising from
    breakpoint m to m + 1 and falling to m + 2, scaled by
    2 / (hz[m + 2] - hz[m]) so every filter has the same area.

    Args:
        fft_length: Number of FFT bins
        mel_bins: Number of mel filters
        sampling_rate: Sampling frequency in Hz
        max_mel: Pitch of the last breakpoint before log compression
        mel_frequency_spacing: Hz per mel in the linear region
        config: Prebuilt MelConfig; overrides the keyword options

    Returns:
        Filterbank of shape (mel_bins, fft_length), non-negative

    Examples:
        >>> fb = mel_filters(10, 5, 8.0e3)
        >>> fb.shape
        (5, 10)
        >>> round(float(fb[0, 1]), 7)
        0.0008129
    """
    if config is None:
        config = MelConfig(
            fft_length=fft_length,
            mel_bins=mel_bins,
            sampling_rate=sampling_rate,
            max_mel=max_mel,
            mel_frequency_spacing=mel_frequency_spacing
        )

    f_sp = config.mel_frequency_spacing
    n_mels = config.mel_bins

    fftfreqs = fft_frequencies(config.sampling_rate, config.fft_length)

    mels = np.linspace(0.0, config.max_mel / f_sp, n_mels + 2)
    mel_f = mel_to_hz(mels, f_sp)

    fdiff = np.diff(mel_f)
    ramps = mel_f[:, np.newaxis] - fftfreqs[np.newaxis, :]

    # Rising and falling edges of every triangle; the filter is their lower envelope
    lower = -ramps[:n_mels] / fdiff[:n_mels, np.newaxis]
    upper = ramps[2:n_mels + 2] / fdiff[1:n_mels + 1, np.newaxis]
    weights = np.maximum(0.0, np.minimum(lower, upper))

    enorm = 2.0 / (mel_f[2:n_mels + 2] - mel_f[:n_mels])
    return weights * enorm[:, np.newaxis]


def stft_to_mel(
    spectrum: np.ndarray,
    sampling_rate: Optional[float] = None,
    fft_length: Optional[int] = None,
    mel_bins: int = 128,
    max_mel: float = 3016.0,
    mel_frequency_spacing: float = DEFAULT_MEL_SPACING,
    config: Optional[MelConfig] = None
) -> np.ndarray:
    """
    Convert an STFT spectrum into a log-compressed mel spectrogram.

    Steps:
        1. Power spectrum |Z|^2, keeping the first fft_length // 2 bins
        2. Projection onto the mel filterbank
        3. log10 with a floor of 1e-10
        4. Clip to at most 8 decades below each frame's maximum
        5. Rescale with (log_spec + 4) / 4, which maps the usual range to about [0, 1]

    Args:
        spectrum: STFT output, shape (..., num_frames, fft_length)
        sampling_rate: Sampling frequency in Hz
        fft_length: Number of FFT bins (default: spectrum width)
        mel_bins: Number of mel bins (default: 128)
        max_mel: See mel_filters()
        mel_frequency_spacing: See mel_filters()
        config: Prebuilt MelConfig; overrides the keyword options

    Returns:
        float64 array of shape (..., num_frames, mel_bins)
    """
    spectrum = np.asarray(spectrum)
    if spectrum.ndim < 1:
        raise ConfigurationError(
            f"stft_to_mel expects a spectrum of shape (..., num_frames, fft_length), "
            f"got shape {spectrum.shape}"
        )

    if config is None:
        config = MelConfig(
            fft_length=spectrum.shape[-1] if fft_length is None else fft_length,
            mel_bins=mel_bins,
            sampling_rate=sampling_rate,
            max_mel=max_mel,
            mel_frequency_spacing=mel_frequency_spacing
        )

    if spectrum.shape[-1] != config.fft_length:
        raise ConfigurationError(
            f"spectrum has {spectrum.shape[-1]} frequency bins but fft_length={config.fft_length}"
        )

    freq_size = config.fft_length // 2
    magnitudes = np.abs(spectrum[..., :freq_size]) ** 2
    filters = mel_filters(config=config)[:, :freq_size]

    mel_spec = magnitudes @ filters.T

    log_spec = np.log10(np.maximum(mel_spec, AMIN))
    log_spec = np.maximum(log_spec, log_spec.max(axis=-1, keepdims=True) - TOP_DECADES)

    logger.debug(
        "stft_to_mel: spectrum shape %s -> mel shape %s", spectrum.shape, log_spec.shape
    )
    return (log_spec + 4.0) / 4.0
