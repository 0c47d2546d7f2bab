"""
Per-operation configuration.

Each public operation has a frozen dataclass holding its options. Options are
validated when the object is built, so a bad configuration fails before any
array work starts. Keyword arguments passed to the operations are folded into
these objects, and the same objects can be loaded from a YAML file:

    stft:
      sampling_rate: 16000
      fft_length: 512
      overlap_length: 256
      scaling: psd
    mel:
      fft_length: 512
      mel_bins: 80
      sampling_rate: 16000
"""

from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np
import yaml

from .errors import ArgumentError, ConfigurationError
from .fft import next_power_of_two
from .shape import Padding, normalize_padding, normalize_stride

SCALING_MODES = ('none', 'spectrum', 'psd')
POWER_OF_TWO = 'power_of_two'

# numpy dtype kinds: bool, signed, unsigned, float, complex
NUMERIC_KINDS = 'biufc'


def _check_scaling(scaling: str) -> None:
    if scaling not in SCALING_MODES:
        raise ArgumentError(
            f"invalid scaling option, expected one of {', '.join(SCALING_MODES)}, "
            f"got: {scaling!r}"
        )


def _check_sampling_rate(sampling_rate, required: bool = True) -> None:
    if sampling_rate is None:
        if required:
            raise ArgumentError("missing sampling_rate option")
        return
    if isinstance(sampling_rate, bool) or not isinstance(sampling_rate, (int, float, np.integer, np.floating)):
        raise ArgumentError(f"sampling_rate must be a number, got: {sampling_rate!r}")
    if sampling_rate <= 0:
        raise ArgumentError(f"sampling_rate must be positive, got: {sampling_rate!r}")


def _check_positive_number(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise ArgumentError(f"{name} must be a number, got: {value!r}")
    if value <= 0:
        raise ArgumentError(f"{name} must be positive, got: {value!r}")


def _check_fft_length(fft_length, allow_none: bool = False) -> None:
    if fft_length is None and allow_none:
        return
    if fft_length == POWER_OF_TWO:
        return
    if isinstance(fft_length, bool) or not isinstance(fft_length, (int, np.integer)) or fft_length < 1:
        raise ArgumentError(
            f"fft_length must be a positive integer or {POWER_OF_TWO!r}, got: {fft_length!r}"
        )


def _check_overlap(overlap_length, allow_none: bool = True) -> None:
    if overlap_length is None and allow_none:
        return
    if isinstance(overlap_length, bool) or not isinstance(overlap_length, (int, np.integer)) \
            or overlap_length < 0:
        raise ArgumentError(
            f"overlap_length must be a non-negative integer, got: {overlap_length!r}"
        )


def resolve_overlap(overlap_length: Optional[int], frame_length: int) -> int:
    """Default to half a frame and check the overlap leaves a positive stride."""
    if overlap_length is None:
        overlap_length = frame_length // 2
    if overlap_length >= frame_length:
        raise ConfigurationError(
            f"overlap_length must be less than the window length {frame_length}, "
            f"got: {overlap_length}"
        )
    return int(overlap_length)


class _ConfigMixin:
    """Dictionary round-trip shared by all configuration classes."""

    @classmethod
    def field_names(cls):
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]):
        """Build a config from a mapping, rejecting keys the operation does not know."""
        if options is None:
            options = {}
        if not isinstance(options, Mapping):
            raise ArgumentError(f"{cls.__name__} expects a mapping of options, got: {options!r}")

        known = cls.field_names()
        unknown = sorted(set(options) - set(known))
        if unknown:
            raise ArgumentError(
                f"unknown option(s) for {cls.__name__}: {', '.join(unknown)}; "
                f"recognized options are: {', '.join(known)}"
            )
        return cls(**options)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FrameConfig(_ConfigMixin):
    """Options of the frame extractor (as_windowed)."""
    window_length: int
    stride: int = 1
    padding: Padding = 'valid'

    def __post_init__(self):
        if isinstance(self.window_length, bool) or not isinstance(self.window_length, (int, np.integer)) \
                or self.window_length < 1:
            raise ArgumentError(
                f"window_length must be a positive integer, got: {self.window_length!r}"
            )
        object.__setattr__(self, 'stride', normalize_stride(self.stride))
        object.__setattr__(self, 'padding', normalize_padding(self.padding))


@dataclass(frozen=True)
class OverlapAddConfig(_ConfigMixin):
    """Options of the overlap-adder."""
    overlap_length: int = 0
    dtype: Any = None

    def __post_init__(self):
        _check_overlap(self.overlap_length, allow_none=False)
        if self.dtype is not None:
            try:
                dtype = np.dtype(self.dtype)
            except TypeError as exc:
                raise ArgumentError(f"invalid dtype option: {self.dtype!r}") from exc
            if dtype.kind not in NUMERIC_KINDS or dtype.kind == 'b':
                raise ArgumentError(
                    f"invalid dtype option, expected a non-bool numeric dtype, got: {dtype}"
                )


@dataclass(frozen=True)
class STFTConfig(_ConfigMixin):
    """
    Options of the spectral analyzer.

    Attributes
    ----------
    sampling_rate : float
        Sampling frequency of the input in Hz. Required.
    fft_length : int or 'power_of_two'
        DFT length. 'power_of_two' rounds the frame length up to the next
        power of two.
    overlap_length : int, optional
        Samples shared by consecutive frames. Defaults to frame_length // 2.
    window_padding : str or (int, int)
        Padding mode forwarded to the frame extractor.
    scaling : {'none', 'spectrum', 'psd'}
        Normalisation applied to each spectrum row.
    """
    sampling_rate: float = None
    fft_length: Union[int, str] = POWER_OF_TWO
    overlap_length: Optional[int] = None
    window_padding: Padding = 'valid'
    scaling: str = 'none'

    def __post_init__(self):
        _check_sampling_rate(self.sampling_rate)
        _check_fft_length(self.fft_length)
        _check_overlap(self.overlap_length)
        object.__setattr__(self, 'window_padding', normalize_padding(self.window_padding))
        _check_scaling(self.scaling)

    def resolve_fft_length(self, frame_length: int) -> int:
        if self.fft_length == POWER_OF_TWO:
            return next_power_of_two(frame_length)
        return int(self.fft_length)

    def resolve_overlap(self, frame_length: int) -> int:
        return resolve_overlap(self.overlap_length, frame_length)


@dataclass(frozen=True)
class ISTFTConfig(_ConfigMixin):
    """
    Options of the spectral synthesizer.

    fft_length defaults to the width of the spectrum. sampling_rate is only
    needed to undo 'psd' scaling.
    """
    fft_length: Optional[int] = None
    overlap_length: Optional[int] = None
    sampling_rate: Optional[float] = None
    scaling: str = 'none'

    def __post_init__(self):
        if self.fft_length == POWER_OF_TWO:
            raise ArgumentError(
                f"fft_length for istft must be an integer, got: {self.fft_length!r}"
            )
        _check_fft_length(self.fft_length, allow_none=True)
        _check_overlap(self.overlap_length)
        _check_scaling(self.scaling)
        _check_sampling_rate(self.sampling_rate, required=self.scaling == 'psd')

    def resolve_overlap(self, frame_length: int) -> int:
        return resolve_overlap(self.overlap_length, frame_length)


@dataclass(frozen=True)
class MelConfig(_ConfigMixin):
    """Options of the mel projector."""
    fft_length: int = None
    mel_bins: int = 128
    sampling_rate: float = None
    max_mel: float = 3016.0
    mel_frequency_spacing: float = 200.0 / 3.0

    def __post_init__(self):
        if self.fft_length is None:
            raise ArgumentError("missing fft_length option")
        _check_fft_length(self.fft_length)
        if self.fft_length == POWER_OF_TWO:
            raise ArgumentError(
                f"fft_length for mel filters must be an integer, got: {self.fft_length!r}"
            )
        if isinstance(self.mel_bins, bool) or not isinstance(self.mel_bins, (int, np.integer)) \
                or self.mel_bins < 1:
            raise ArgumentError(f"mel_bins must be a positive integer, got: {self.mel_bins!r}")
        _check_sampling_rate(self.sampling_rate)
        _check_positive_number('max_mel', self.max_mel)
        _check_positive_number('mel_frequency_spacing', self.mel_frequency_spacing)


CONFIG_SECTIONS = {
    'frame': FrameConfig,
    'overlap_add': OverlapAddConfig,
    'stft': STFTConfig,
    'istft': ISTFTConfig,
    'mel': MelConfig,
}


def _from_yaml_value(section: str, options: Mapping[str, Any]) -> Mapping[str, Any]:
    # YAML has no tuples; explicit padding arrives as a list
    if not isinstance(options, Mapping):
        return options
    options = dict(options)
    for key in ('padding', 'window_padding'):
        value = options.get(key)
        if isinstance(value, list):
            if len(value) == 2 and all(isinstance(v, int) for v in value):
                options[key] = tuple(value)
            else:
                options[key] = [tuple(v) if isinstance(v, list) else v for v in value]
    return options


def load_config(config_path: Union[str, Path]) -> Dict[str, _ConfigMixin]:
    """
    Load operation configurations from a YAML file.

    Args:
        config_path: Path to a YAML file whose top-level keys are any of
            'frame', 'overlap_add', 'stft', 'istft', 'mel'.

    Returns:
        Dict mapping each section present in the file to its config object.
    """
    with open(config_path, 'r') as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ArgumentError(f"configuration file {config_path} must contain a mapping")

    unknown = sorted(set(raw) - set(CONFIG_SECTIONS))
    if unknown:
        raise ArgumentError(
            f"unknown configuration section(s) in {config_path}: {', '.join(unknown)}; "
            f"recognized sections are: {', '.join(CONFIG_SECTIONS)}"
        )

    return {
        section: CONFIG_SECTIONS[section].from_dict(_from_yaml_value(section, options))
        for section, options in raw.items()
    }
