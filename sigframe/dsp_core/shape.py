"""
Shape bookkeeping for the frame extractor.

Turns a padding mode into explicit (low, high) amounts and computes how many
frames a padded signal yields.
"""

import math
from typing import Sequence, Tuple, Union

import numpy as np

from .errors import ArgumentError, ConfigurationError

PADDING_MODES = ('valid', 'same', 'reflect')

Padding = Union[str, Tuple[int, int], Sequence[Tuple[int, int]]]


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def normalize_padding(padding: Padding) -> Union[str, Tuple[int, int]]:
    """
    Validate a padding specification.

    Returns the mode name for 'valid'/'same'/'reflect', or a (low, high)
    tuple for explicit padding. A one-element list [(low, high)] is accepted
    as well, since the signal has a single axis.
    """
    if isinstance(padding, str):
        if padding not in PADDING_MODES:
            raise ArgumentError(
                f"invalid padding mode specified, padding must be one of "
                f"{', '.join(repr(m) for m in PADDING_MODES)} or a (low, high) "
                f"padding configuration, got: {padding!r}"
            )
        return padding

    if isinstance(padding, list):
        if len(padding) != 1:
            raise ArgumentError(
                f"padding configuration must have exactly one (low, high) entry "
                f"for a 1-D signal, got {len(padding)}: {padding!r}"
            )
        padding = padding[0]

    if isinstance(padding, tuple) and len(padding) == 2 and all(_is_int(p) for p in padding):
        low, high = padding
        if low < 0 or high < 0:
            raise ArgumentError(f"padding amounts must be non-negative, got: {padding!r}")
        return (low, high)

    raise ArgumentError(
        f"padding must be a (low, high) tuple of integers, got: {padding!r}"
    )


def normalize_stride(stride) -> int:
    """Accept an int >= 1 or a one-element list/tuple holding one."""
    if isinstance(stride, (list, tuple)):
        if len(stride) != 1:
            raise ArgumentError(
                f"invalid stride dimensions, a 1-D signal takes exactly one stride, "
                f"got {len(stride)}: {stride!r}"
            )
        stride = stride[0]

    if not _is_int(stride) or stride < 1:
        raise ArgumentError(f"expected stride to be an integer >= 1, got: {stride!r}")
    return stride


def to_padding_config(window_length: int, padding: Padding) -> Tuple[int, int]:
    """
    Padding amounts for a given mode.

    'valid' pads nothing, 'same' splits window_length - 1 samples as
    (floor, ceil), 'reflect' pads window_length // 2 on both sides and an
    explicit configuration is passed through.

    Examples
    --------
    >>> to_padding_config(4, 'same')
    (1, 2)
    >>> to_padding_config(6, 'reflect')
    (3, 3)
    """
    padding = normalize_padding(padding)

    if padding == 'valid':
        return (0, 0)
    if padding == 'same':
        total = max(window_length - 1, 0)
        return (total // 2, math.ceil(total / 2))
    if padding == 'reflect':
        half = window_length // 2
        return (half, half)
    return padding


def pooled_length(length: int, window_length: int, stride: int, padding_config: Tuple[int, int]) -> int:
    """Number of frames produced from a signal of `length` samples."""
    low, high = padding_config
    padded = length + low + high
    num_frames = (padded - window_length) // stride + 1

    if padded < window_length or num_frames <= 0:
        raise ConfigurationError(
            f"window_length={window_length} with stride={stride} and padding={padding_config} "
            f"would produce no frames for a signal of length {length}"
        )
    return num_frames
