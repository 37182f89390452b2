# BSD 3-Clause License

# Copyright (c) 2025, Miguel Dovale

# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:

# 1. Redistributions of source code must retain the above copyright notice, this
#    list of conditions and the following disclaimer.

# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.

# 3. Neither the name of the copyright holder nor the names of its
#    contributors may be used to endorse or promote products derived from
#    this software without specific prior written permission.

# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

# This software may be subject to U.S. export control laws. By accepting this
# software, the user agrees to comply with all applicable U.S. export laws and
# regulations. User has the responsibility to obtain export licenses, or other
# export authority as may be required before exporting such information to
# foreign countries or providing access to foreign persons.
#
import time
import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ._config import (
    DEFAULT_MAX_SEGMENT_LENGTH,
    DEFAULT_OVERLAP,
    DEFAULT_WINDOW,
    MIN_SEGMENT_LENGTH,
    SEGMENT_FRACTION,
)
from .core import accumulate_periodogram
from .dsp import integral_rms, parseval_power
from .exceptions import ConfigurationError, InsufficientDataError
from .report import format_summary
from .scaling import SCALINGS, frequency_axis, scale_periodogram
from .segments import Segmenter, count_segments
from .utils import nearest_power_of_two, next_power_of_two, readonly, round_half_up
from .windows import Window, get_window

logger = logging.getLogger(__name__)


class WelchConfig(NamedTuple):
    """
    Resolved, validated estimator configuration.

    n_samples : int
        Signal length N.
    segment_length : int
        Segment length L.
    overlap : int
        Samples shared by consecutive segments O (0 <= O < L).
    n_segments : int
        Number of averaged segments K = floor((N - O) / (L - O)).
    nfft : int
        Transform length (>= L; > L means zero padding).
    window : str
        Window family name.
    fs : float or None
        Sampling frequency in Hz (None for the power spectrum).
    scaling : str
        "density" or "spectrum".
    """
    n_samples: int
    segment_length: int
    overlap: int
    n_segments: int
    nfft: int
    window: str
    fs: Optional[float]
    scaling: str


# Parameter resolution -----------------------------------------------------------

def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def default_segment_length(
    N: int, max_segment_length: Optional[int] = DEFAULT_MAX_SEGMENT_LENGTH
) -> int:
    """
    Heuristic segment length: the power of two nearest N / 8, clamped to
    [min(16, N), min(N, max_segment_length)].
    """
    N = int(N)
    if N < 1:
        raise InsufficientDataError("The signal is empty.")
    L = nearest_power_of_two(N / SEGMENT_FRACTION)
    lo = min(MIN_SEGMENT_LENGTH, N)
    hi = N if max_segment_length is None else min(N, int(max_segment_length))
    return int(min(max(L, lo), hi))


def _overlap_samples(overlap: Union[int, float], L: int) -> int:
    """Absolute overlap in samples from an int count or a float fraction of L."""
    if _is_int(overlap):
        return int(overlap)
    if isinstance(overlap, (float, np.floating)):
        a = float(overlap)
        if not np.isfinite(a) or not (0.0 <= a < 1.0):
            raise ConfigurationError(f"Overlap fraction must be in [0, 1); got {a!r}.")
        return min(int(round_half_up(L * a)), L - 1)
    raise TypeError(
        f"`overlap` must be an int (samples) or a float fraction in [0, 1); got {overlap!r}"
    )


def _length_from_n_segments(N: int, K: int, overlap: Union[int, float]) -> int:
    """Segment length giving about K segments over N samples."""
    if _is_int(overlap):
        # N = (K - 1) (L - O) + L
        L = (N + (K - 1) * int(overlap)) // K
    else:
        a = float(overlap)
        if not np.isfinite(a) or not (0.0 <= a < 1.0):
            raise ConfigurationError(f"Overlap fraction must be in [0, 1); got {a!r}.")
        L = int(N / (K * (1.0 - a) + a))
    return min(L, N)


def _resolve_nfft(nfft: Union[None, int, str], L: int) -> int:
    if nfft is None:
        return L
    if isinstance(nfft, str):
        if nfft.lower() != "pow2":
            raise ConfigurationError(f"`nfft` must be None, an int or 'pow2'; got {nfft!r}.")
        return next_power_of_two(L)
    if not _is_int(nfft):
        raise TypeError(f"`nfft` must be None, an int or 'pow2'; got {nfft!r}.")
    if int(nfft) < L:
        raise ConfigurationError(f"`nfft`={nfft} must be >= segment length {L}.")
    return int(nfft)


def resolve_config(
    N: int,
    *,
    scaling: str,
    fs: Optional[float] = None,
    segment_length: Optional[int] = None,
    overlap: Union[int, float] = DEFAULT_OVERLAP,
    window: Union[str, Callable] = DEFAULT_WINDOW,
    n_segments: Optional[int] = None,
    nfft: Union[None, int, str] = None,
    max_segment_length: Optional[int] = DEFAULT_MAX_SEGMENT_LENGTH,
) -> Tuple[WelchConfig, Window]:
    """
    Validate the user parameters for a signal of length N.

    Returns the resolved WelchConfig and the float64 Window. Every
    configuration problem is raised here as ConfigurationError (or
    InsufficientDataError when no full segment fits).
    """
    if scaling not in SCALINGS:
        raise ConfigurationError(f"`scaling` must be one of {SCALINGS}, got {scaling!r}.")
    N = int(N)
    if N < 1:
        raise InsufficientDataError("The signal is empty.")

    # ---- Sampling frequency --------------------------------------------------
    if scaling == "density":
        if fs is None:
            raise ConfigurationError("`fs` is required for the spectral density.")
        try:
            fs = float(fs)
        except (TypeError, ValueError) as exc:
            raise TypeError(f"`fs` must be a float, got {fs!r}.") from exc
        if not np.isfinite(fs) or fs <= 0:
            raise ConfigurationError(f"`fs` must be a positive finite float, got {fs!r}.")
    else:
        fs = None

    # ---- Segment length ------------------------------------------------------
    if max_segment_length is not None:
        if not _is_int(max_segment_length) or max_segment_length < 1:
            raise ConfigurationError(
                f"`max_segment_length` must be a positive int, got {max_segment_length!r}."
            )
    if segment_length is not None:
        if not _is_int(segment_length):
            raise TypeError(f"`segment_length` must be an int, got {segment_length!r}.")
        L = int(segment_length)
    elif n_segments is not None:
        if not _is_int(n_segments) or n_segments < 1:
            raise ConfigurationError(f"`n_segments` must be a positive int, got {n_segments!r}.")
        L = _length_from_n_segments(N, int(n_segments), overlap)
        if L < 1:
            raise InsufficientDataError(
                f"Signal of length {N} is too short for {n_segments} segments."
            )
    else:
        L = default_segment_length(N, max_segment_length)
    if L < 1:
        raise ConfigurationError(f"Segment length must be >= 1, got {L}.")
    if L > N:
        raise ConfigurationError(f"Segment length {L} exceeds the signal length {N}.")

    # ---- Overlap, segment count, transform size ------------------------------
    O = _overlap_samples(overlap, L)
    K = count_segments(N, L, O)
    if K < 1:
        raise InsufficientDataError(
            f"Signal of length {N} yields no full segment (L={L}, O={O})."
        )
    M = _resolve_nfft(nfft, L)

    # ---- Window ----------------------------------------------------------------
    win = get_window(window, L)

    config = WelchConfig(
        n_samples=N,
        segment_length=L,
        overlap=O,
        n_segments=K,
        nfft=M,
        window=win.name,
        fs=fs,
        scaling=scaling,
    )
    return config, win


def _as_signal(data) -> np.ndarray:
    """Read-only 1D float32/float64 view of the input (copied only if converted)."""
    x = np.asarray(data)
    if np.iscomplexobj(x):
        raise ConfigurationError("Input signal must be real-valued.")
    if x.ndim != 1:
        raise ConfigurationError(
            f"Input signal must be a 1D array, got shape {x.shape}."
        )
    if x.dtype not in (np.float32, np.float64):
        try:
            x = x.astype(np.float64)
        except (TypeError, ValueError) as exc:
            raise TypeError(f"Input signal of dtype {x.dtype} is not numeric.") from exc
    if x.shape[0] == 0:
        raise InsufficientDataError("The signal is empty.")
    # Warn (don't fail) on NaN/Inf in input
    if not np.all(np.isfinite(x)):
        logger.warning("Input data contains NaN/Inf; results may be undefined.")
    return readonly(x)


# Estimators -----------------------------------------------------------------------

class WelchEstimator:
    """
    Welch averaged, modified periodogram estimator.

    The estimator is configured and validated once at construction; every
    call to `periodogram()` recomputes the estimate from the signal, the
    resolved configuration and the window. Use the `SpectralDensity` and
    `PowerSpectrum` variants rather than this class directly.
    """

    def __init__(
        self,
        data: np.ndarray,
        fs: Optional[float] = None,
        *,
        scaling: str = "density",
        segment_length: Optional[int] = None,
        overlap: Union[int, float] = DEFAULT_OVERLAP,
        window: Union[str, Callable] = DEFAULT_WINDOW,
        n_segments: Optional[int] = None,
        nfft: Union[None, int, str] = None,
        max_segment_length: Optional[int] = DEFAULT_MAX_SEGMENT_LENGTH,
        workers: Optional[int] = None,
        batch_size: Optional[int] = None,
        verbose: bool = False,
    ):
        """
        Initializes the estimator.

        Parameters
        ----------
        data : np.ndarray
            1D real time series. float32 input is processed and returned in
            single precision, anything else in double precision.
        fs : float, optional
            Sampling frequency in Hz. Required (> 0) for scaling="density".
        scaling : {"density", "spectrum"}
            Spectral density (units^2/Hz) or power spectrum (units^2).
        segment_length : int, optional
            Segment length L. Defaults to the power of two nearest N/8,
            clamped to [16, max_segment_length] (and to N).
        overlap : int or float, optional
            Overlap between segments: an int is a number of samples, a float
            a fraction of L in [0, 1). Defaults to 0.5.
        window : str or callable, optional
            "hann" (default), "rectangular", "hamming", "blackman", or a
            callable returning L coefficients in [0, 1].
        n_segments : int, optional
            Desired number of segments; sets L when `segment_length` is not
            given.
        nfft : int or "pow2", optional
            Transform length. Defaults to L; larger values zero-pad.
        max_segment_length : int, optional
            Upper bound of the heuristic segment length. Defaults to 4096.
        workers : int, optional
            Threads for the FFT blocks (scipy.fft semantics, -1 = all cores).
        batch_size : int, optional
            Segments per FFT block. Defaults to about 2**20 values per block.
        verbose : bool, optional
            If True, logs the configuration and compute times. Defaults to False.
        """
        self.verbose = bool(verbose)
        self._x = _as_signal(data)
        self._dtype = self._x.dtype

        self._config, win = resolve_config(
            self._x.shape[0],
            scaling=scaling,
            fs=fs,
            segment_length=segment_length,
            overlap=overlap,
            window=window,
            n_segments=n_segments,
            nfft=nfft,
            max_segment_length=max_segment_length,
        )
        self._window = Window(win.name, win.weights.astype(self._dtype))

        if workers is not None and (not _is_int(workers) or workers == 0):
            raise ConfigurationError(f"`workers` must be a non-zero int, got {workers!r}.")
        if batch_size is not None and (not _is_int(batch_size) or batch_size < 1):
            raise ConfigurationError(f"`batch_size` must be a positive int, got {batch_size!r}.")
        self._workers = None if workers is None else int(workers)
        self._batch_size = None if batch_size is None else int(batch_size)

        if self.verbose:
            cfg = self._config
            logger.info(
                f"{type(self).__name__}: N={cfg.n_samples} | L={cfg.segment_length} | "
                f"O={cfg.overlap} | K={cfg.n_segments} | nfft={cfg.nfft} | "
                f"win={cfg.window} | dtype={self._dtype}"
            )

    @property
    def config(self) -> WelchConfig:
        return self._config

    @property
    def window(self) -> Window:
        return self._window

    @property
    def scaling(self) -> str:
        return self._config.scaling

    @property
    def fs(self) -> Optional[float]:
        return self._config.fs

    @property
    def dtype(self):
        return self._dtype

    @property
    def resolution(self) -> float:
        """Bin spacing: fs / nfft in Hz for the density, 1 / nfft otherwise."""
        if self.scaling == "density":
            return self._config.fs / self._config.nfft
        return 1.0 / self._config.nfft

    def segments(self) -> Segmenter:
        """Lazy, restartable sequence of the segments being averaged."""
        return Segmenter(self._x, self._config.segment_length, self._config.overlap)

    def two_sided(self) -> np.ndarray:
        """Unscaled mean two-sided periodogram (float64, length nfft)."""
        return accumulate_periodogram(
            self.segments(),
            self._window.weights,
            nfft=self._config.nfft,
            workers=self._workers,
            batch_size=self._batch_size,
        )

    def periodogram(self) -> np.ndarray:
        """
        One-sided Welch estimate, read-only, length nfft // 2 + 1.

        Spectral density in units^2/Hz or power spectrum in units^2,
        depending on the estimator variant.
        """
        t0 = time.perf_counter()
        S = scale_periodogram(
            self.two_sided(),
            self._window,
            self.scaling,
            fs=self._config.fs,
            dtype=self._dtype,
        )
        if self.verbose:
            logger.info(
                f"Periodogram of {self._config.n_segments} segments computed in "
                f"{time.perf_counter() - t0:.3f} seconds."
            )
        return readonly(S)

    def frequency(self) -> np.ndarray:
        """Frequencies of the periodogram bins (Hz, or cycles/sample), read-only."""
        f = frequency_axis(self._config.nfft, self.scaling, fs=self._config.fs, dtype=self._dtype)
        return readonly(f)

    def summary(self) -> str:
        """Formatted description of the resolved configuration."""
        return format_summary(self._config)

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        cfg = self._config
        return (
            f"{type(self).__name__}(N={cfg.n_samples}, L={cfg.segment_length}, "
            f"O={cfg.overlap}, K={cfg.n_segments}, window={cfg.window!r})"
        )

    def compute(self) -> "WelchResult":
        """
        Computes the periodogram and returns it with its frequency axis in a
        WelchResult container.
        """
        results = {
            "f": self.frequency(),
            "values": self.periodogram(),
            "navg": self._config.n_segments,
            "S1": self._window.sum,
            "S2": self._window.sum_sq,
        }
        return WelchResult(results, self._config)


class SpectralDensity(WelchEstimator):
    """
    Welch estimate of the one-sided power spectral density (units^2/Hz).

    Example
    -------
    >>> sd = SpectralDensity(x, fs=10e3)
    >>> psd, f = sd.periodogram(), sd.frequency()
    """

    def __init__(self, data: np.ndarray, fs: float, **kwargs):
        super().__init__(data, fs, scaling="density", **kwargs)

    @classmethod
    def builder(cls, data: np.ndarray, fs: float, **kwargs) -> "SpectralDensity":
        """Same as the constructor."""
        return cls(data, fs, **kwargs)


class PowerSpectrum(WelchEstimator):
    """
    Welch estimate of the one-sided power spectrum (units^2), on a normalized
    frequency axis in cycles/sample.

    With the default Hann window the plain sum of the bins is not the signal
    variance: it is scaled by the window's noise bandwidth in bins (about
    1.5). Use `compute().total_power()` for the variance, or
    `window="rectangular"`, for which `sum(periodogram())` is the variance.
    """

    def __init__(self, data: np.ndarray, **kwargs):
        super().__init__(data, None, scaling="spectrum", **kwargs)

    @classmethod
    def builder(cls, data: np.ndarray, **kwargs) -> "PowerSpectrum":
        """Same as the constructor."""
        return cls(data, **kwargs)


# Results ---------------------------------------------------------------------------

class WelchResult:
    """
    An immutable container for a Welch estimate.

    Attributes
    ----------
    f : np.ndarray
        Bin frequencies (Hz for the density, cycles/sample for the spectrum).
    values : np.ndarray
        The one-sided estimate.
    psd : np.ndarray or None
        Power spectral density (density variant only).
    asd : np.ndarray or None
        Amplitude spectral density (density variant only).
    ps : np.ndarray or None
        Power spectrum (spectrum variant only).
    df : float
        Bin spacing.
    ENBW : float
        Equivalent noise bandwidth of the window, in the units of `f`.
    navg : int
        Number of averaged segments.
    dev : np.ndarray
        Standard deviation estimate of `values`, values / sqrt(navg).
    error : float
        Normalized random error, 1 / sqrt(navg).
    """

    def __init__(self, results_dict: Dict[str, Any], config: WelchConfig):
        """Initializes the result object."""
        self._data = dict(results_dict)
        self._config = config
        self._cache: Dict[str, Any] = {}

    def __setattr__(self, key, value):
        if "_cache" in self.__dict__:
            raise AttributeError(f"'{type(self).__name__}' object is immutable")
        object.__setattr__(self, key, value)

    def __delattr__(self, key):
        raise AttributeError(f"'{type(self).__name__}' object is immutable")

    @property
    def config(self) -> WelchConfig:
        return self._config

    @property
    def isdensity(self) -> bool:
        return self._config.scaling == "density"

    def __getattr__(self, name: str) -> Any:
        """Lazy computation and caching of derived quantities."""
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._cache:
            return self._cache[name]

        fs = self._config.fs if self.isdensity else 1.0
        val: Any = None
        if name == "df":
            val = fs / self._config.nfft
        elif name == "ENBW":
            val = fs * self._data["S2"] / (self._data["S1"] ** 2)
        elif name in ("psd", "G"):
            val = self._data["values"] if self.isdensity else None
        elif name == "asd":
            val = readonly(np.sqrt(self.psd)) if self.isdensity else None
        elif name == "ps":
            val = None if self.isdensity else self._data["values"]
        elif name == "dev":
            val = readonly(self._data["values"] / np.sqrt(self._data["navg"]))
        elif name == "error":
            val = 1.0 / np.sqrt(self._data["navg"])
        elif name in self._data:
            val = self._data[name]
        else:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )

        self._cache[name] = val
        return val

    def __dir__(self) -> List[str]:
        """Enhances tab-completion to include dynamic attributes."""
        default_attrs = super().__dir__()
        dynamic_attrs = ["df", "ENBW", "psd", "G", "asd", "ps", "dev", "error"]
        return sorted(
            list(set(default_attrs + list(self._data.keys()) + dynamic_attrs))
        )

    def __len__(self) -> int:
        return len(self._data["values"])

    def total_power(self) -> float:
        """
        Signal variance recovered from the estimate (Parseval).

        Sum of psd * df for the density; for the power spectrum the sum of
        the bins is divided by the window's noise bandwidth in bins.
        """
        if self.isdensity:
            return parseval_power(self.values, df=self.df)
        return parseval_power(self.values, enbw_bins=self.ENBW / self.df)

    def get_rms(self, pass_band: Optional[Tuple[float, float]] = None) -> float:
        """
        Computes the Root Mean Square (RMS) of the signal by integrating the ASD.

        Parameters
        ----------
        pass_band : tuple of (float, float), optional
            The frequency band `(f_min, f_max)` over which to compute the RMS.
            If None, the entire frequency range is used. Defaults to None.

        Returns
        -------
        float
            The computed RMS value.
        """
        if not self.isdensity:
            raise NotImplementedError(
                "RMS integration is only available for the spectral density."
            )
        return integral_rms(self.f, self.asd, pass_band)

    def peak(self, band: Optional[Tuple[float, float]] = None) -> Tuple[float, float]:
        """
        Frequency and value of the largest bin, DC excluded unless it is the
        only bin in `band`.
        """
        f = np.asarray(self.f, dtype=np.float64)
        v = np.asarray(self.values, dtype=np.float64)
        idx = np.arange(f.shape[0])
        if band is not None:
            fmin, fmax = band
            idx = idx[(f >= fmin) & (f <= fmax)]
            if idx.size == 0:
                raise ValueError("No frequencies found in the specified band.")
        if idx.size > 1:
            idx = idx[idx > 0]
        i = int(idx[np.argmax(v[idx])])
        return float(f[i]), float(v[i])

    def get_measurement(
        self, freq: Union[float, np.ndarray], which: str = "values"
    ) -> Union[float, np.ndarray]:
        """
        Evaluates a quantity ('values', 'psd', 'asd', 'ps', 'dev') at given
        frequencies via linear interpolation.
        """
        target_signal = getattr(self, which)
        if target_signal is None:
            raise ValueError(f"'{which}' is not available for this estimate.")
        return np.interp(freq, self.f, target_signal)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Exports the estimate and its per-bin statistics to a pandas DataFrame
        indexed by frequency.
        """
        df_dict = {"f": self.f}
        for attr in ("psd", "asd", "ps", "dev"):
            value = getattr(self, attr)
            if isinstance(value, np.ndarray) and len(value) == len(self.f):
                df_dict[attr] = value
        return pd.DataFrame(df_dict).set_index("f")


# One-shot helpers ------------------------------------------------------------------

def welch(
    data: np.ndarray, fs: Optional[float] = None, scaling: Optional[str] = None, **kwargs
) -> WelchResult:
    """
    Computes a Welch estimate in a single call.

    Parameters
    ----------
    data : np.ndarray
        1D real time series.
    fs : float, optional
        Sampling frequency in Hz.
    scaling : {"density", "spectrum"}, optional
        Defaults to "density" when `fs` is given, "spectrum" otherwise.
    **kwargs :
        Passed to the estimator (`segment_length`, `overlap`, `window`,
        `n_segments`, `nfft`, `workers`, `verbose`, ...).

    Returns
    -------
    WelchResult
    """
    if scaling is None:
        scaling = "spectrum" if fs is None else "density"
    if scaling == "density":
        return SpectralDensity(data, fs, **kwargs).compute()
    if scaling == "spectrum":
        return PowerSpectrum(data, **kwargs).compute()
    raise ConfigurationError(f"`scaling` must be one of {SCALINGS}, got {scaling!r}.")


def compute_spectral_density(data: np.ndarray, fs: float, **kwargs) -> WelchResult:
    """Spectral density of `data` sampled at `fs` Hz in one call."""
    return SpectralDensity(data, fs, **kwargs).compute()


def compute_power_spectrum(data: np.ndarray, **kwargs) -> WelchResult:
    """Power spectrum of `data` in one call."""
    return PowerSpectrum(data, **kwargs).compute()
