"""
Framing and overlap-add.

as_windowed() slices a 1-D signal into overlapping fixed-length frames;
overlap_and_add() is its inverse for frames laid out with a constant hop,
summing the samples that consecutive frames share.
"""

from typing import Optional

import numpy as np
from numba import jit

from ..utils.logging import get_logger
from .config import NUMERIC_KINDS, FrameConfig, OverlapAddConfig
from .errors import ArgumentError, ConfigurationError
from .shape import Padding, pooled_length, to_padding_config

logger = get_logger(__name__)


def as_windowed(
    x: np.ndarray,
    window_length: Optional[int] = None,
    stride: int = 1,
    padding: Padding = 'valid',
    config: Optional[FrameConfig] = None
) -> np.ndarray:
    """
    Return the overlapping frames of a 1-D signal.

    Parameters
    ----------
    x : np.ndarray
        1-D signal, real or complex. Left untouched.
    window_length : int
        Number of samples per frame
    stride : int
        Samples between the starts of consecutive frames (default: 1)
    padding : str or (int, int)
        - 'valid': no padding, only complete frames
        - 'same': window_length - 1 zeros split (floor, ceil) around the
          signal, so every sample is covered
        - (low, high): explicit number of zeros before and after
        - 'reflect': window_length // 2 mirrored samples on both sides
          (the edge sample is not repeated), so the first frame is centred
          on x[0]
    config : FrameConfig, optional
        Prebuilt configuration; overrides the keyword options

    Returns
    -------
    np.ndarray
        Frames of shape (num_frames, window_length), same dtype as x, where
        num_frames = (padded_length - window_length) // stride + 1

    Examples
    --------
    >>> as_windowed(np.array([0, 1, 2, 3, 4, 10, 11]), window_length=2, stride=2, padding=(0, 3))
    array([[ 0,  1],
           [ 2,  3],
           [ 4, 10],
           [11,  0],
           [ 0,  0]])
    """
    if config is None:
        config = FrameConfig(window_length=window_length, stride=stride, padding=padding)

    x = np.asarray(x)
    if x.ndim != 1:
        raise ConfigurationError(
            f"as_windowed only supports 1-D signals, got shape {x.shape}"
        )

    window_length = config.window_length
    stride = config.stride
    padding_config = to_padding_config(window_length, config.padding)
    num_frames = pooled_length(len(x), window_length, stride, padding_config)

    if config.padding == 'reflect':
        if len(x) < 2 and padding_config != (0, 0):
            raise ConfigurationError(
                f"reflect padding needs at least 2 samples, got a signal of length {len(x)}"
            )
        padded = np.pad(x, padding_config, mode='reflect')
    elif padding_config != (0, 0):
        padded = np.pad(x, padding_config, mode='constant', constant_values=0)
    else:
        padded = x

    logger.debug(
        "as_windowed: length=%d window_length=%d stride=%d padding=%s -> %d frames",
        len(x), window_length, stride, padding_config, num_frames
    )

    # Row i gathers padded[i * stride : i * stride + window_length]
    frame_starts = np.arange(num_frames) * stride
    frame_indices = frame_starts[:, np.newaxis] + np.arange(window_length)

    return padded[frame_indices]


@jit(nopython=True, cache=True)
def _scatter_add(frames: np.ndarray, stride: int, out: np.ndarray) -> None:
    """Accumulate frame i at out[i * stride:]; overlapping samples are summed."""
    num_windows, window_length = frames.shape
    for i in range(num_windows):
        start = i * stride
        for j in range(window_length):
            out[start + j] += frames[i, j]


def _accumulator_dtype(dtype: np.dtype) -> np.dtype:
    """Dtype the numba kernel sums in; float16 and extended precision are not compiled."""
    if dtype.kind == 'b':
        return np.dtype(np.int64)
    if dtype.kind == 'f' and dtype.itemsize not in (4, 8):
        return np.dtype(np.float64)
    if dtype.kind == 'c' and dtype.itemsize not in (8, 16):
        return np.dtype(np.complex128)
    return dtype


def overlap_and_add(
    frames: np.ndarray,
    overlap_length: Optional[int] = None,
    dtype=None,
    config: Optional[OverlapAddConfig] = None
) -> np.ndarray:
    """
    Overlap-add a batch of frames into one continuous signal.

    Frame i starts at sample i * stride, with stride = window_length -
    overlap_length. The output is long enough for the last frame to appear
    in full.

    Parameters
    ----------
    frames : np.ndarray
        Shape (..., num_windows, window_length). Leading dimensions are
        independent batches; each gets its own output.
    overlap_length : int
        Samples shared by consecutive frames, must be < window_length
        (default: 0)
    dtype : optional
        Output dtype. Defaults to the dtype of `frames` (int64 for bool
        frames, so collisions are counted). float16 and extended precision
        are summed in a wider type and cast back.
    config : OverlapAddConfig, optional
        Prebuilt configuration; overrides the keyword options

    Returns
    -------
    np.ndarray
        Shape (..., num_windows * stride + overlap_length)

    Examples
    --------
    >>> overlap_and_add(np.arange(12).reshape(3, 4), overlap_length=3)
    array([ 0,  5, 15, 18, 17, 11])
    """
    if config is None:
        config = OverlapAddConfig(
            overlap_length=0 if overlap_length is None else overlap_length,
            dtype=dtype
        )

    frames = np.asarray(frames)
    if frames.ndim < 2:
        raise ConfigurationError(
            f"overlap_and_add expects frames of shape (..., num_windows, window_length), "
            f"got shape {frames.shape}"
        )

    *batch_shape, num_windows, window_length = frames.shape
    overlap_length = config.overlap_length
    if overlap_length >= window_length:
        raise ConfigurationError(
            f"overlap_length must be a number less than the window size {window_length}, "
            f"got: {overlap_length}"
        )

    stride = window_length - overlap_length
    output_length = num_windows * stride + overlap_length
    if frames.dtype.kind not in NUMERIC_KINDS:
        raise ArgumentError(f"overlap_and_add expects numeric frames, got dtype {frames.dtype}")

    if config.dtype is not None:
        out_dtype = np.dtype(config.dtype)
    elif frames.dtype.kind == 'b':
        # Colliding True samples count, they do not OR
        out_dtype = np.dtype(np.int64)
    else:
        out_dtype = frames.dtype
    acc_dtype = _accumulator_dtype(out_dtype)

    batches = frames.reshape(-1, num_windows, window_length).astype(acc_dtype, copy=False)
    output = np.zeros((batches.shape[0], output_length), dtype=acc_dtype)

    # One buffer per batch slice
    for b in range(batches.shape[0]):
        _scatter_add(np.ascontiguousarray(batches[b]), stride, output[b])

    return output.astype(out_dtype, copy=False).reshape(*batch_shape, output_length)
