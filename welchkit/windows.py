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
"""
windows.py — taper functions applied to each segment before the transform
-----------------------------------------------------------------------------
All built-in families use the symmetric definition (endpoints included), e.g.
Hann: w[j] = sin^2(pi * j / (L - 1)). Coefficients are clipped to [0, 1].

The two scalars needed for scaling are exposed on the Window object:
    sum    = sum(w)      -> power-spectrum normalization (sum)^2
    sum_sq = sum(w**2)   -> spectral-density normalization fs * sum_sq
-----------------------------------------------------------------------------
"""
__all__ = ["Window", "get_window", "win_dict", "window_names"]

from typing import Callable, Union

import numpy as np

from .exceptions import ConfigurationError
from .utils import get_key_for_function, is_function_in_dict, readonly


def rectangular(L: int) -> np.ndarray:
    """Rectangular (boxcar) window of length L."""
    return np.ones(L, dtype=np.float64)


win_dict = {
    "rectangular": rectangular,
    "hann": np.hanning,
    "hamming": np.hamming,
    "blackman": np.blackman,
}

_aliases = {
    "boxcar": "rectangular",
    "one": "rectangular",
    "ones": "rectangular",
    "hanning": "hann",
}

_EPS = 1e-12


def window_names():
    """Names of the built-in window families."""
    return sorted(win_dict)


class Window:
    """
    Immutable taper of length L.

    Attributes
    ----------
    name : str
        Family name ("hann", "rectangular", ...) or the callable's name.
    weights : (L,) ndarray
        Read-only taper coefficients in [0, 1].
    sum : float
        Sum of the coefficients.
    sum_sq : float
        Sum of the squared coefficients.
    """

    __slots__ = ("_name", "_weights", "_sum", "_sum_sq")

    def __init__(self, name: str, weights: np.ndarray):
        w = np.ascontiguousarray(weights)
        if w.ndim != 1 or w.shape[0] < 1:
            raise ConfigurationError("Window weights must be a non-empty 1D array.")
        self._name = str(name)
        self._weights = readonly(w)
        # scalars in double precision whatever the weights dtype
        w64 = w.astype(np.float64, copy=False)
        self._sum = float(np.sum(w64))
        self._sum_sq = float(np.sum(w64 * w64))
        if self._sum <= 0.0 or self._sum_sq <= 0.0:
            raise ConfigurationError(
                f"Window '{self._name}' of length {w.shape[0]} is all zeros."
            )

    def __setattr__(self, key, value):
        if hasattr(self, "_sum_sq"):
            raise AttributeError(f"'{type(self).__name__}' object is immutable")
        object.__setattr__(self, key, value)

    def __len__(self) -> int:
        return self._weights.shape[0]

    def __repr__(self) -> str:
        return f"Window(name={self._name!r}, length={len(self)})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    @property
    def dtype(self):
        return self._weights.dtype

    @property
    def sum(self) -> float:
        return self._sum

    @property
    def sum_sq(self) -> float:
        return self._sum_sq

    @property
    def coherent_gain(self) -> float:
        """Mean coefficient, sum / L."""
        return self._sum / len(self)

    @property
    def enbw_bins(self) -> float:
        """Equivalent noise bandwidth in bins, L * sum_sq / sum^2."""
        return len(self) * self._sum_sq / (self._sum * self._sum)


def _resolve(win: Union[str, Callable]):
    """Return (name, function) for a window name or callable."""
    if isinstance(win, str):
        key = win.lower()
        key = _aliases.get(key, key)
        if key not in win_dict:
            raise ConfigurationError(
                f"Window function '{win}' not recognized. "
                f"Available: {window_names()}"
            )
        return key, win_dict[key]
    elif callable(win):
        if is_function_in_dict(win, win_dict):
            return get_key_for_function(win, win_dict), win
        return getattr(win, "__name__", "custom_win"), win
    raise TypeError("Window must be a recognized string or a callable function.")


def get_window(win: Union[str, Callable], L: int, dtype=np.float64) -> Window:
    """
    Build a Window of length L.

    Parameters
    ----------
    win : str or callable
        One of "rectangular", "hann", "hamming", "blackman" (case-insensitive,
        aliases "boxcar"/"one" and "hanning" accepted), or a callable
        ``f(L) -> array`` returning L coefficients in [0, 1].
    L : int
        Window length (must be >= 1).
    dtype : numpy dtype, optional
        Floating dtype of the returned weights. Defaults to float64.

    Returns
    -------
    Window
    """
    if isinstance(L, bool) or not isinstance(L, (int, np.integer)):
        raise TypeError(f"Window length must be an integer, got {L!r}.")
    L = int(L)
    if L < 1:
        raise ConfigurationError(f"Window length must be >= 1, got {L}.")

    name, func = _resolve(win)
    w = np.asarray(func(L), dtype=np.float64)
    if w.shape != (L,):
        raise ConfigurationError(f"Window length {w.shape} != L {L}.")
    if not np.all(np.isfinite(w)):
        raise ConfigurationError(f"Window '{name}' contains NaN/Inf coefficients.")
    if np.any(w < -_EPS) or np.any(w > 1.0 + _EPS):
        raise ConfigurationError(f"Window '{name}' coefficients must lie in [0, 1].")
    w = np.clip(w, 0.0, 1.0)
    return Window(name, w.astype(dtype, copy=False))
