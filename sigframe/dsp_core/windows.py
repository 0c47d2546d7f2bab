"""
Window functions.

Every generator takes the window length `n` and returns a 1-D numpy array.
Generators with a `periodic` flag produce the DFT-even window by default
(the symmetric window of length n + 1 with its last sample dropped), which is
what the STFT wants; pass periodic=False for the symmetric filter-design
window.
"""

from typing import Union

import numpy as np

from .errors import ArgumentError


def _check_length(n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 1:
        raise ArgumentError(f"window length must be a positive integer, got: {n!r}")


def _extend(n: int, periodic: bool) -> int:
    return n + 1 if periodic else n


def _truncate(window: np.ndarray, periodic: bool) -> np.ndarray:
    return window[:-1] if periodic else window


def _cosine_sum(n: int, coefficients, periodic: bool, dtype) -> np.ndarray:
    """w[k] = sum_i (-1)^i a_i cos(2 pi i k / (M - 1))"""
    _check_length(n)
    m = _extend(n, periodic)
    if n == 1:
        return np.ones(1, dtype=dtype)

    k = np.arange(m)
    w = np.zeros(m)
    for i, a in enumerate(coefficients):
        w += (-1) ** i * a * np.cos(2 * np.pi * i * k / (m - 1))
    return _truncate(w, periodic).astype(dtype)


def rectangular(n: int, dtype=np.float64) -> np.ndarray:
    """
    Rectangular window.

    Useful for when no window function should be applied.

    >>> rectangular(3)
    array([1., 1., 1.])
    """
    _check_length(n)
    return np.ones(n, dtype=dtype)


def hann(n: int, periodic: bool = True, dtype=np.float64) -> np.ndarray:
    """
    Hann window: w[k] = 0.5 * (1 - cos(2 pi k / (M - 1))).

    >>> hann(5, periodic=False)
    array([0. , 0.5, 1. , 0.5, 0. ])
    """
    return _cosine_sum(n, (0.5, 0.5), periodic, dtype)


def hamming(n: int, periodic: bool = True, dtype=np.float64) -> np.ndarray:
    """Hamming window: w[k] = 0.54 - 0.46 * cos(2 pi k / (M - 1))."""
    return _cosine_sum(n, (0.54, 0.46), periodic, dtype)


def blackman(n: int, periodic: bool = True, dtype=np.float64) -> np.ndarray:
    """Blackman window: 0.42 - 0.5 cos(2 pi k / (M - 1)) + 0.08 cos(4 pi k / (M - 1))."""
    return _cosine_sum(n, (0.42, 0.5, 0.08), periodic, dtype)


def bartlett(n: int, periodic: bool = True, dtype=np.float64) -> np.ndarray:
    """
    Bartlett window, a triangle with zero-valued end points.

    See also: triangular

    >>> bartlett(3)
    array([0.        , 0.66666667, 0.66666667])
    """
    _check_length(n)
    m = _extend(n, periodic)
    if n == 1:
        return np.ones(1, dtype=dtype)

    k = np.arange(m)
    w = 1.0 - np.abs(2.0 * k / (m - 1) - 1.0)
    return _truncate(w, periodic).astype(dtype)


def triangular(n: int, dtype=np.float64) -> np.ndarray:
    """
    Triangular window with non-zero end points.

    See also: bartlett

    >>> triangular(3)
    array([0.5, 1. , 0.5])
    """
    _check_length(n)
    k = np.arange(1, (n + 1) // 2 + 1)
    if n % 2 == 1:
        left = 2.0 * k / (n + 1)
        w = np.concatenate([left, left[-2::-1]])
    else:
        left = (2.0 * k - 1.0) / n
        w = np.concatenate([left, left[::-1]])
    return w.astype(dtype)


def kaiser(n: int, beta: float = 12.0, periodic: bool = True, dtype=np.float64) -> np.ndarray:
    """
    Kaiser window, a taper formed from the zeroth-order modified Bessel function.

    As beta increases the main lobe widens and the side lobes drop.
    """
    _check_length(n)
    m = _extend(n, periodic)
    if n == 1:
        return np.ones(1, dtype=dtype)

    ratio = np.linspace(-1.0, 1.0, m)
    w = np.i0(beta * np.sqrt(np.clip(1.0 - ratio ** 2, 0.0, None))) / np.i0(beta)
    return _truncate(w, periodic).astype(dtype)


_WINDOWS = {
    'rectangular': rectangular,
    'boxcar': rectangular,
    'rect': rectangular,
    'hann': hann,
    'hamming': hamming,
    'blackman': blackman,
    'bartlett': bartlett,
    'triangular': triangular,
    'kaiser': kaiser,
}

_NO_PERIODIC_FLAG = ('rectangular', 'boxcar', 'rect', 'triangular')


def get_window(window: Union[str, tuple, np.ndarray], win_length: int, periodic: bool = True) -> np.ndarray:
    """
    Generate a window function for STFT.

    Parameters
    ----------
    window : str, tuple, or np.ndarray
        Window specification:
        - 'hann', 'hamming', 'blackman', 'bartlett', 'triangular',
          'rectangular' (aliases 'boxcar', 'rect'), 'kaiser'
        - ('kaiser', beta): Kaiser window with shape parameter beta
        - np.ndarray: custom window (must have length win_length)
    win_length : int
        Length of the window
    periodic : bool
        DFT-even window if True, symmetric window otherwise

    Returns
    -------
    np.ndarray
        Window function of length win_length
    """
    if isinstance(window, np.ndarray):
        if window.ndim != 1 or len(window) != win_length:
            raise ArgumentError(
                f"Custom window shape {window.shape} does not match win_length {win_length}"
            )
        return window

    if isinstance(window, tuple):
        window_type, *params = window
    else:
        window_type = window
        params = []

    if window_type not in _WINDOWS:
        raise ArgumentError(f"Unknown window type: {window_type!r}")

    generator = _WINDOWS[window_type]
    if window_type in _NO_PERIODIC_FLAG:
        if params:
            raise ArgumentError(f"window {window_type!r} takes no parameters, got: {params!r}")
        return generator(win_length)
    if params and window_type != 'kaiser':
        raise ArgumentError(f"window {window_type!r} takes no parameters, got: {params!r}")
    return generator(win_length, *params, periodic=periodic)
