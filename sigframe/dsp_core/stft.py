"""
Short-Time Fourier Transform and its inverse.

Spectra are laid out frames-by-frequencies, shape (..., num_frames,
fft_length), holding the full (two-sided) DFT of every windowed frame.
istft() inverts stft() by weighted overlap-add: frames are windowed a second
time, summed, and divided by the overlap-added squared window.
"""

from typing import Optional, Tuple, Union

import numpy as np

from ..utils.logging import get_logger, log_config
from .config import ISTFTConfig, STFTConfig
from .errors import ArgumentError, ConfigurationError
from .fft import fft, ifft, fft_frequencies
from .framing import as_windowed, overlap_and_add
from .shape import Padding

logger = get_logger(__name__)

# Normalisation denominators below this are replaced by 1.0
WINDOW_SUM_FLOOR = 1e-10


def _check_window(window: np.ndarray) -> np.ndarray:
    window = np.asarray(window)
    if window.ndim != 1 or window.shape[0] < 1:
        raise ConfigurationError(
            f"window must be a non-empty 1-D array, got shape {window.shape}"
        )
    return window


def scaling_factor(window: np.ndarray, scaling: str, sampling_rate: Optional[float] = None) -> float:
    """
    Factor each spectrum row is divided by for a given scaling mode.

    - 'none': 1
    - 'spectrum': sum(window), so a sinusoid's peak reads as its amplitude
    - 'psd': sqrt(sampling_rate * sum(window ** 2)), so |Z|^2 is a power
      spectral density

    A window whose factor is zero raises ConfigurationError.
    """
    if scaling == 'none':
        return 1.0
    if scaling == 'spectrum':
        factor = np.sum(window)
    elif scaling == 'psd':
        if sampling_rate is None:
            raise ArgumentError("missing sampling_rate option, required for scaling='psd'")
        factor = np.sqrt(sampling_rate * np.sum(np.abs(window) ** 2))
    else:
        raise ArgumentError(
            f"invalid scaling option, expected one of none, spectrum, psd, got: {scaling!r}"
        )

    if factor == 0:
        raise ConfigurationError(
            f"scaling={scaling!r} is undefined for this window: its scaling factor is zero"
        )
    return factor


def stft(
    x: np.ndarray,
    window: np.ndarray,
    sampling_rate: Optional[float] = None,
    fft_length: Union[int, str] = 'power_of_two',
    overlap_length: Optional[int] = None,
    window_padding: Padding = 'valid',
    scaling: str = 'none',
    config: Optional[STFTConfig] = None
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Compute the Short-Time Fourier Transform of a signal.

    Parameters
    ----------
    x : np.ndarray
        Signal of shape (..., N). Leading dimensions are independent batches.
    window : np.ndarray
        Analysis window; its length is the frame length
    sampling_rate : float
        Sampling frequency in Hz (required)
    fft_length : int or 'power_of_two'
        DFT length. Frames are zero-padded or truncated to it.
        'power_of_two' uses the next power of two >= frame length.
    overlap_length : int, optional
        Overlap between frames (default: frame_length // 2)
    window_padding : str or (int, int)
        Padding passed to as_windowed ('valid', 'same', 'reflect' or
        (low, high)); default 'valid'
    scaling : {'none', 'spectrum', 'psd'}
        Spectrum normalisation (default: 'none')
    config : STFTConfig, optional
        Prebuilt configuration; overrides the keyword options

    Returns
    -------
    spectrum : np.ndarray
        complex128, shape (..., num_frames, fft_length)
    times : np.ndarray
        Time in seconds of each frame: (i + 1) * frame_length / (2 * sampling_rate)
    frequencies : np.ndarray
        Frequency in Hz of each bin: k * sampling_rate / fft_length

    Examples
    --------
    >>> z, t, f = stft(np.arange(4), np.ones(2), sampling_rate=400, overlap_length=1, fft_length=2)
    >>> z.real
    array([[ 1., -1.],
           [ 3., -1.],
           [ 5., -1.]])
    >>> t
    array([0.0025, 0.005 , 0.0075])
    >>> f
    array([  0., 200.])
    """
    if config is None:
        config = STFTConfig(
            sampling_rate=sampling_rate,
            fft_length=fft_length,
            overlap_length=overlap_length,
            window_padding=window_padding,
            scaling=scaling
        )

    window = _check_window(window)
    frame_length = window.shape[0]
    n_fft = config.resolve_fft_length(frame_length)
    overlap = config.resolve_overlap(frame_length)
    stride = frame_length - overlap
    factor = scaling_factor(window, config.scaling, config.sampling_rate)

    x = np.asarray(x)
    if x.ndim < 1:
        raise ConfigurationError(f"stft expects a signal of shape (..., N), got shape {x.shape}")

    log_config(logger, "stft", {
        'frame_length': frame_length,
        'fft_length': n_fft,
        'overlap_length': overlap,
        'window_padding': config.window_padding,
        'scaling': config.scaling,
        'sampling_rate': config.sampling_rate,
    })

    batch_shape = x.shape[:-1]
    signals = x.reshape(int(np.prod(batch_shape)), x.shape[-1])

    spectra = []
    for signal in signals:
        frames = as_windowed(signal, window_length=frame_length, stride=stride,
                             padding=config.window_padding)
        spectra.append(fft(frames * window, n=n_fft) / factor)

    if spectra:
        spectrum = np.stack(spectra)
    else:
        # Empty batch: frame count still follows from the signal length
        num_frames = len(as_windowed(np.zeros(x.shape[-1]), window_length=frame_length,
                                     stride=stride, padding=config.window_padding))
        spectrum = np.zeros((0, num_frames, n_fft), dtype=np.complex128)

    num_frames = spectrum.shape[1]
    spectrum = spectrum.reshape(*batch_shape, num_frames, n_fft)

    # Each frame is tagged with the middle of its time window
    time_step = frame_length / (2 * config.sampling_rate)
    times = time_step * np.arange(1, num_frames + 1)
    frequencies = fft_frequencies(config.sampling_rate, n_fft)

    logger.debug("stft: signal shape %s -> spectrum shape %s", x.shape, spectrum.shape)
    return spectrum, times, frequencies


def istft_frames(
    spectrum: np.ndarray,
    window: np.ndarray,
    fft_length: Optional[int] = None,
    sampling_rate: Optional[float] = None,
    scaling: str = 'none',
    config: Optional[ISTFTConfig] = None
) -> np.ndarray:
    """
    Inverse-transform every spectrum row and apply the synthesis window.

    Returns the windowed time-domain frames, shape (..., num_frames,
    frame_length), before any overlap-add. Frames longer than the window
    (fft_length > frame_length) are truncated, shorter ones zero-extended.

    Examples
    --------
    >>> z = np.array([[1, -1], [3, -1], [5, -1]])
    >>> istft_frames(z, np.ones(2)).real
    array([[0., 1.],
           [1., 2.],
           [2., 3.]])
    """
    if config is None:
        config = ISTFTConfig(fft_length=fft_length, sampling_rate=sampling_rate, scaling=scaling)

    window = _check_window(window)
    factor = scaling_factor(window, config.scaling, config.sampling_rate)
    spectrum = np.asarray(spectrum)
    if spectrum.ndim < 2:
        raise ConfigurationError(
            f"istft expects a spectrum of shape (..., num_frames, fft_length), "
            f"got shape {spectrum.shape}"
        )

    frame_length = window.shape[0]
    n_fft = spectrum.shape[-1] if config.fft_length is None else int(config.fft_length)

    frames = ifft(spectrum, n=n_fft)
    frames = frames * factor

    if n_fft >= frame_length:
        frames = frames[..., :frame_length]
    else:
        pad_width = [(0, 0)] * (frames.ndim - 1) + [(0, frame_length - n_fft)]
        frames = np.pad(frames, pad_width, mode='constant')

    return frames * window


def istft(
    spectrum: np.ndarray,
    window: np.ndarray,
    fft_length: Optional[int] = None,
    overlap_length: Optional[int] = None,
    sampling_rate: Optional[float] = None,
    scaling: str = 'none',
    config: Optional[ISTFTConfig] = None
) -> np.ndarray:
    """
    Compute the Inverse Short-Time Fourier Transform.

    Parameters
    ----------
    spectrum : np.ndarray
        Spectrum of shape (..., num_frames, fft_length), as returned by stft()
    window : np.ndarray
        Synthesis window; must be the analysis window
    fft_length : int, optional
        DFT length used for the forward transform (default: spectrum width)
    overlap_length : int, optional
        Overlap between frames (default: frame_length // 2)
    sampling_rate : float, optional
        Sampling frequency in Hz; only needed for scaling='psd'
    scaling : {'none', 'spectrum', 'psd'}
        Must match the forward transform (default: 'none')
    config : ISTFTConfig, optional
        Prebuilt configuration; overrides the keyword options

    Returns
    -------
    np.ndarray
        complex128 signal of shape (..., num_frames * stride + overlap_length)

    Notes
    -----
    With matching window, overlap and scaling, and a window whose squared
    overlap-add never vanishes in the interior (e.g. Hann at 50% overlap),
    the input of stft() is recovered everywhere except the first and last
    overlap_length samples, where only part of a window contributed.
    Samples where the squared-window sum is below 1e-10 are left unnormalised.
    """
    if config is None:
        config = ISTFTConfig(
            fft_length=fft_length,
            overlap_length=overlap_length,
            sampling_rate=sampling_rate,
            scaling=scaling
        )

    window = _check_window(window)
    frame_length = window.shape[0]
    overlap = config.resolve_overlap(frame_length)

    frames = istft_frames(spectrum, window, config=config)
    num_frames = frames.shape[-2]

    log_config(logger, "istft", {
        'frame_length': frame_length,
        'fft_length': np.shape(spectrum)[-1] if config.fft_length is None else config.fft_length,
        'overlap_length': overlap,
        'scaling': config.scaling,
        'num_frames': num_frames,
    })

    signal = overlap_and_add(frames, overlap_length=overlap)

    window_sum = overlap_and_add(
        np.broadcast_to(window ** 2, (num_frames, frame_length)),
        overlap_length=overlap,
        dtype=np.result_type(window.dtype, np.float64)
    )
    window_sum = np.where(np.abs(window_sum) < WINDOW_SUM_FLOOR, 1.0, window_sum)

    return signal / window_sum
