"""
FFT Implementation using Numba JIT

Cooley-Tukey radix-2 FFT for power-of-two lengths and a direct DFT for any
other length, both compiled with Numba. Multi-dimensional inputs are
flattened to rows and transformed by a parallel batch kernel, so every row is
transformed independently.
"""

import math
from typing import Optional

import numpy as np
from numba import jit, prange

from .errors import ArgumentError

NORM_MODES = ('backward', 'ortho', 'forward')


@jit(nopython=True, cache=True)
def _bit_reverse(x: int, n_bits: int) -> int:
    """Reverse the bits of x with n_bits."""
    result = 0
    for _ in range(n_bits):
        result = (result << 1) | (x & 1)
        x >>= 1
    return result


@jit(nopython=True, cache=True)
def _fft_radix2_iter(x: np.ndarray) -> np.ndarray:
    """
    Iterative Cooley-Tukey radix-2 DIT FFT (Numba JIT).

    Bit-reversal permutation followed by log2(N) butterfly stages.
    """
    N = len(x)
    n_bits = int(math.log2(N))

    X = np.empty(N, dtype=np.complex128)
    for i in range(N):
        j = _bit_reverse(i, n_bits)
        X[j] = x[i]

    # Stages: size 2, 4, 8, ..., N
    stage_size = 2
    while stage_size <= N:
        half_size = stage_size // 2
        w_mult = np.exp(-2j * np.pi / stage_size)

        for k in range(0, N, stage_size):
            w = 1.0 + 0j
            for j in range(half_size):
                even_idx = k + j
                odd_idx = k + j + half_size

                even = X[even_idx]
                odd = X[odd_idx] * w

                X[even_idx] = even + odd
                X[odd_idx] = even - odd

                w = w * w_mult

        stage_size *= 2

    return X


@jit(nopython=True, cache=True)
def _dft_naive_jit(x: np.ndarray) -> np.ndarray:
    """Direct DFT for non-power-of-2 lengths (JIT compiled)."""
    N = len(x)
    X = np.empty(N, dtype=np.complex128)

    for k in range(N):
        s = 0j
        for n in range(N):
            s += x[n] * np.exp(-2j * np.pi * ((k * n) % N) / N)
        X[k] = s

    return X


@jit(nopython=True, cache=True)
def _fft_core(x: np.ndarray) -> np.ndarray:
    """Core FFT: handles both power-of-2 and arbitrary lengths."""
    N = len(x)

    if N > 0 and N & (N - 1) == 0:
        return _fft_radix2_iter(x)
    else:
        return _dft_naive_jit(x)


@jit(nopython=True, cache=True, parallel=True)
def _fft_rows(rows: np.ndarray) -> np.ndarray:
    """
    Transform every row of a 2-D complex array.

    Rows are independent, so they are spread over threads with prange.
    """
    n_rows, n = rows.shape
    result = np.empty((n_rows, n), dtype=np.complex128)

    for i in prange(n_rows):
        result[i] = _fft_core(rows[i])

    return result


def _check_norm(norm: str) -> None:
    if norm not in NORM_MODES:
        raise ArgumentError(f"invalid norm option, expected one of {NORM_MODES}, got: {norm!r}")


def _resize_last_axis(x: np.ndarray, n: int) -> np.ndarray:
    """Zero-pad or truncate the last axis to n samples."""
    if x.shape[-1] < n:
        pad_width = [(0, 0)] * (x.ndim - 1) + [(0, n - x.shape[-1])]
        return np.pad(x, pad_width, mode='constant', constant_values=0)
    if x.shape[-1] > n:
        return x[..., :n]
    return x


def fft(x: np.ndarray, n: Optional[int] = None, axis: int = -1, norm: str = "backward") -> np.ndarray:
    """
    Compute the 1-D discrete Fourier Transform along one axis.

    Parameters
    ----------
    x : np.ndarray
        Input array, real or complex
    n : int, optional
        Length of the transformed axis. The input is zero-padded or truncated
        to this length. If None, uses the length of x along `axis`.
    axis : int
        Axis along which to compute the FFT (default: -1)
    norm : str
        Normalization mode: "backward", "ortho", or "forward"

    Returns
    -------
    np.ndarray
        complex128 array with `axis` resized to n

    Examples
    --------
    >>> fft(np.array([0.0, 1.0]))
    array([ 1.+0.j, -1.+0.j])
    """
    _check_norm(norm)
    x = np.asarray(x)

    if n is None:
        n = x.shape[axis]
    if n < 1:
        raise ArgumentError(f"invalid number of data points ({n}) specified")

    x = np.moveaxis(x, axis, -1)
    x = _resize_last_axis(x, n)

    original_shape = x.shape
    rows = np.ascontiguousarray(x.reshape(-1, n), dtype=np.complex128)
    result = _fft_rows(rows).reshape(original_shape)

    if norm == "ortho":
        result = result / np.sqrt(n)
    elif norm == "forward":
        result = result / n

    return np.moveaxis(result, -1, axis)


def ifft(x: np.ndarray, n: Optional[int] = None, axis: int = -1, norm: str = "backward") -> np.ndarray:
    """
    Compute the 1-D inverse discrete Fourier Transform.

    IFFT(x) = conj(FFT(conj(x))) / N
    """
    _check_norm(norm)
    x_conj = np.conj(np.asarray(x))

    if norm == "backward":
        result = fft(x_conj, n=n, axis=axis, norm="forward")
    elif norm == "forward":
        result = fft(x_conj, n=n, axis=axis, norm="backward")
    else:
        result = fft(x_conj, n=n, axis=axis, norm="ortho")

    return np.conj(result)


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def fft_frequencies(sampling_rate: float, fft_length: int, endpoint: bool = False) -> np.ndarray:
    """
    Frequency in Hz of each bin of a length-`fft_length` DFT.

    Bins are evenly spaced from 0 up to `sampling_rate` (excluded unless
    `endpoint` is True), i.e. bin k sits at k * sampling_rate / fft_length.

    Examples
    --------
    >>> fft_frequencies(1.6e4, 10)
    array([    0.,  1600.,  3200.,  4800.,  6400.,  8000.,  9600., 11200.,
           12800., 14400.])
    """
    step = sampling_rate / fft_length
    return np.linspace(0.0, step * fft_length, num=fft_length, endpoint=endpoint)
