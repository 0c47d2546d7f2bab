"""
Unit tests for frame extraction (as_windowed) and overlap-add.

Framing is checked against explicit slicing and librosa.util.frame;
overlap-add against a np.add.at reference.

Run:
    pytest tests/test_framing.py -v
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
import librosa

from sigframe.dsp_core import (
    as_windowed,
    overlap_and_add,
    FrameConfig,
    OverlapAddConfig,
    ArgumentError,
    ConfigurationError,
)


def _reference_overlap_add(frames, overlap_length):
    num_windows, window_length = frames.shape
    stride = window_length - overlap_length
    out = np.zeros(num_windows * stride + overlap_length, dtype=frames.dtype)
    idx = np.arange(num_windows)[:, None] * stride + np.arange(window_length)
    np.add.at(out, idx, frames)
    return out


class TestAsWindowed:
    """Test suite for the frame extractor."""

    def test_valid_padding_examples(self):
        x = np.array([0, 1, 2, 3, 4, 10, 11, 12])

        np.testing.assert_array_equal(
            as_windowed(x, window_length=4),
            [[0, 1, 2, 3],
             [1, 2, 3, 4],
             [2, 3, 4, 10],
             [3, 4, 10, 11],
             [4, 10, 11, 12]]
        )
        np.testing.assert_array_equal(
            as_windowed(x, window_length=3),
            [[0, 1, 2],
             [1, 2, 3],
             [2, 3, 4],
             [3, 4, 10],
             [4, 10, 11],
             [10, 11, 12]]
        )

    def test_frame_count_law(self):
        """Valid framing yields (L - k) // s + 1 rows, row i == x[i*s : i*s+k]."""
        rng = np.random.default_rng(0)
        for length, k, s in [(100, 10, 1), (100, 10, 3), (257, 64, 32), (64, 64, 5), (50, 7, 7)]:
            x = rng.standard_normal(length)
            frames = as_windowed(x, window_length=k, stride=s)

            assert frames.shape == ((length - k) // s + 1, k)
            for i, row in enumerate(frames):
                np.testing.assert_array_equal(row, x[i * s:i * s + k])

    def test_matches_librosa_frame(self):
        x = np.random.randn(1000)
        ours = as_windowed(x, window_length=128, stride=32)
        reference = librosa.util.frame(x, frame_length=128, hop_length=32, axis=0)

        np.testing.assert_array_equal(ours, reference)

    def test_explicit_padding(self):
        x = np.array([0, 1, 2, 3, 4, 10, 11])
        expected = [[0, 1], [2, 3], [4, 10], [11, 0], [0, 0]]

        np.testing.assert_array_equal(
            as_windowed(x, window_length=2, stride=2, padding=(0, 3)), expected
        )
        # single-axis list form
        np.testing.assert_array_equal(
            as_windowed(x, window_length=2, stride=[2], padding=[(0, 3)]), expected
        )

    def test_same_padding(self):
        x = np.arange(5)
        frames = as_windowed(x, window_length=4, padding='same')

        # (k - 1) = 3 zeros, split (1, 2)
        np.testing.assert_array_equal(
            frames,
            [[0, 0, 1, 2],
             [0, 1, 2, 3],
             [1, 2, 3, 4],
             [2, 3, 4, 0],
             [3, 4, 0, 0]]
        )

    def test_same_padding_covers_every_sample(self):
        x = np.arange(1, 101)
        for k, s in [(8, 1), (8, 4), (9, 3)]:
            frames = as_windowed(x, window_length=k, stride=s, padding='same')
            assert set(np.unique(frames)) - {0} == set(x)

    def test_reflect_padding(self):
        x = np.arange(7)
        frames = as_windowed(x, window_length=6, padding='reflect')

        assert frames.shape == (8, 6)
        np.testing.assert_array_equal(frames[0], [3, 2, 1, 0, 1, 2])
        np.testing.assert_array_equal(frames[-1], [4, 5, 6, 5, 4, 3])

        reference = librosa.util.frame(np.pad(x, 3, mode='reflect'), frame_length=6,
                                       hop_length=1, axis=0)
        np.testing.assert_array_equal(frames, reference)

    def test_reflect_is_true_mirror(self):
        """The first frame mirrors about x[0] without repeating it."""
        x = np.arange(10) + 100
        frames = as_windowed(x, window_length=5, stride=1, padding='reflect')

        np.testing.assert_array_equal(frames[0], [102, 101, 100, 101, 102])
        # centre of frame i is x[i]
        np.testing.assert_array_equal(frames[:, 2], x)

    def test_reflect_with_stride(self):
        x = np.arange(10)
        frames = as_windowed(x, window_length=4, stride=2, padding='reflect')

        assert frames.shape == (6, 4)
        np.testing.assert_array_equal(frames[0], [2, 1, 0, 1])
        np.testing.assert_array_equal(frames[-1], [8, 9, 8, 7])

    def test_keeps_dtype(self):
        x = (np.arange(16) + 1j * np.arange(16)).astype(np.complex64)
        frames = as_windowed(x, window_length=4, stride=4)

        assert frames.dtype == np.complex64
        np.testing.assert_array_equal(frames.ravel(), x)

    def test_input_not_modified(self):
        x = np.arange(10.0)
        frames = as_windowed(x, window_length=4, stride=2)
        frames[:] = -1

        np.testing.assert_array_equal(x, np.arange(10.0))

    def test_config_object(self):
        x = np.arange(20)
        config = FrameConfig(window_length=5, stride=5)

        np.testing.assert_array_equal(as_windowed(x, config=config), x.reshape(4, 5))

    def test_no_frames(self):
        with pytest.raises(ConfigurationError, match="would produce no frames"):
            as_windowed(np.arange(3), window_length=5)

    def test_rejects_higher_rank(self):
        with pytest.raises(ConfigurationError, match="1-D"):
            as_windowed(np.zeros((2, 10)), window_length=4)

    def test_invalid_stride(self):
        with pytest.raises(ArgumentError, match="stride"):
            as_windowed(np.arange(10), window_length=4, stride=[1, 2])
        with pytest.raises(ArgumentError, match="stride"):
            as_windowed(np.arange(10), window_length=4, stride=0)

    def test_invalid_padding(self):
        with pytest.raises(ArgumentError, match="padding"):
            as_windowed(np.arange(10), window_length=4, padding='zeros')
        with pytest.raises(ArgumentError, match="padding"):
            as_windowed(np.arange(10), window_length=4, padding=(1, 2, 3))
        with pytest.raises(ArgumentError, match="padding"):
            as_windowed(np.arange(10), window_length=4, padding=[(0, 1), (0, 1)])

    def test_missing_window_length(self):
        with pytest.raises(ArgumentError, match="window_length"):
            as_windowed(np.arange(10))


class TestOverlapAndAdd:
    """Test suite for the overlap-adder."""

    def test_examples(self):
        frames = np.arange(12).reshape(3, 4)

        np.testing.assert_array_equal(overlap_and_add(frames, overlap_length=0), np.arange(12))
        np.testing.assert_array_equal(
            overlap_and_add(frames, overlap_length=3), [0, 5, 15, 18, 17, 11]
        )

    def test_collisions_are_summed(self):
        out = overlap_and_add(np.ones((4, 4)), overlap_length=2)
        np.testing.assert_array_equal(out, [1, 1, 2, 2, 2, 2, 2, 2, 1, 1])

    def test_output_length(self):
        for num_windows, window_length, overlap in [(1, 8, 0), (5, 8, 3), (10, 16, 15)]:
            frames = np.random.randn(num_windows, window_length)
            out = overlap_and_add(frames, overlap_length=overlap)
            stride = window_length - overlap
            assert out.shape == (num_windows * stride + overlap,)

    def test_matches_reference(self):
        rng = np.random.default_rng(1)
        frames = rng.standard_normal((17, 32)) + 1j * rng.standard_normal((17, 32))

        for overlap in [0, 8, 16, 31]:
            np.testing.assert_allclose(
                overlap_and_add(frames, overlap_length=overlap),
                _reference_overlap_add(frames, overlap),
                rtol=1e-12, atol=1e-12
            )

    def test_no_overlap_inverts_framing(self):
        x = np.random.randn(256)
        frames = as_windowed(x, window_length=16, stride=16)

        np.testing.assert_array_equal(overlap_and_add(frames, overlap_length=0), x)

    def test_batch_isolation(self):
        """Each batch slice is overlap-added on its own."""
        frames = np.random.randn(2, 3, 6, 8)
        out = overlap_and_add(frames, overlap_length=3)

        assert out.shape == (2, 3, 6 * 5 + 3)
        for i in range(2):
            for j in range(3):
                np.testing.assert_allclose(out[i, j], overlap_and_add(frames[i, j], overlap_length=3))

    def test_dtype_option(self):
        frames = np.arange(12).reshape(3, 4)
        out = overlap_and_add(frames, overlap_length=1, dtype=np.float32)

        assert out.dtype == np.float32
        np.testing.assert_array_equal(out, [0, 1, 2, 7, 5, 6, 15, 9, 10, 11])

    def test_float16_frames(self):
        """Half-precision frames are summed in a wider type and keep their dtype."""
        out = overlap_and_add(np.ones((3, 4), dtype=np.float16), overlap_length=1)

        assert out.dtype == np.float16
        np.testing.assert_array_equal(out, [1, 1, 1, 2, 1, 1, 2, 1, 1, 1])

    def test_float16_dtype_option(self):
        out = overlap_and_add(np.arange(12.0).reshape(3, 4), overlap_length=1, dtype=np.float16)

        assert out.dtype == np.float16
        np.testing.assert_array_equal(out, [0, 1, 2, 7, 5, 6, 15, 9, 10, 11])

    def test_bool_frames_are_counted(self):
        out = overlap_and_add(np.ones((3, 4), dtype=bool), overlap_length=1)

        assert out.dtype == np.int64
        np.testing.assert_array_equal(out, [1, 1, 1, 2, 1, 1, 2, 1, 1, 1])

    def test_non_numeric_frames(self):
        with pytest.raises(ArgumentError, match="numeric"):
            overlap_and_add(np.array([['a', 'b'], ['c', 'd']]), overlap_length=0)

    def test_invalid_dtype_option(self):
        with pytest.raises(ArgumentError, match="dtype"):
            overlap_and_add(np.ones((3, 4)), overlap_length=1, dtype=bool)
        with pytest.raises(ArgumentError, match="dtype"):
            overlap_and_add(np.ones((3, 4)), overlap_length=1, dtype=object)

    def test_config_object(self):
        frames = np.arange(12).reshape(3, 4)
        out = overlap_and_add(frames, config=OverlapAddConfig(overlap_length=3))

        np.testing.assert_array_equal(out, [0, 5, 15, 18, 17, 11])

    def test_overlap_too_large(self):
        with pytest.raises(ConfigurationError, match="overlap_length"):
            overlap_and_add(np.ones((3, 4)), overlap_length=4)

    def test_negative_overlap(self):
        with pytest.raises(ArgumentError, match="overlap_length"):
            overlap_and_add(np.ones((3, 4)), overlap_length=-1)

    def test_rejects_1d(self):
        with pytest.raises(ConfigurationError):
            overlap_and_add(np.ones(4), overlap_length=0)
