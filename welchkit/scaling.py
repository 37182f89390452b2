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
scaling.py — one-sided folding, physical units and the frequency axis
-----------------------------------------------------------------------------
For a mean two-sided periodogram P of length M (M = nfft):

    one-sided:  S[0]   = P[0]                      (DC)
                S[k]   = 2 P[k],  0 < k < M/2
                S[M/2] = P[M/2]                     (Nyquist, M even only)

    density  :  S / (fs * sum(w^2))        [units^2 / Hz]
    spectrum :  S / sum(w)^2               [units^2]

Frequencies: k * fs / M for the density, k / M (cycles/sample) otherwise,
k = 0 .. floor(M/2).
-----------------------------------------------------------------------------
"""
__all__ = [
    "SCALINGS",
    "fold_one_sided",
    "density_scale",
    "spectrum_scale",
    "scale_periodogram",
    "frequency_axis",
]

from typing import Optional

import numpy as np

from .windows import Window

SCALINGS = ("density", "spectrum")


def _check_scaling(scaling: str) -> None:
    if scaling not in SCALINGS:
        raise ValueError(f"`scaling` must be one of {SCALINGS}, got {scaling!r}.")


def _check_fs(fs) -> float:
    if fs is None:
        raise ValueError("`fs` is required for the spectral density.")
    fs = float(fs)
    if not np.isfinite(fs) or fs <= 0:
        raise ValueError(f"`fs` must be a positive finite float, got {fs!r}.")
    return fs


def fold_one_sided(two_sided: np.ndarray) -> np.ndarray:
    """
    Fold a two-sided periodogram of length M into its M//2 + 1 one-sided bins.
    """
    P = np.asarray(two_sided)
    M = P.shape[-1]
    n = M // 2 + 1
    S = np.array(P[..., :n], copy=True)
    if M % 2 == 0:
        S[..., 1:n - 1] *= 2.0
    else:
        S[..., 1:] *= 2.0
    return S


def density_scale(window: Window, fs: float) -> float:
    """1 / (fs * sum(w^2))."""
    return 1.0 / (_check_fs(fs) * window.sum_sq)


def spectrum_scale(window: Window) -> float:
    """1 / sum(w)^2."""
    return 1.0 / (window.sum * window.sum)


def scale_periodogram(
    two_sided: np.ndarray,
    window: Window,
    scaling: str,
    fs: Optional[float] = None,
    dtype=np.float64,
) -> np.ndarray:
    """
    Fold and normalize a mean two-sided periodogram.

    Parameters
    ----------
    two_sided : (M,) ndarray
        Mean of |X_k|^2 across segments.
    window : Window
        The taper applied to each segment.
    scaling : {"density", "spectrum"}
        Spectral density (units^2/Hz, requires `fs`) or power spectrum (units^2).
    fs : float, optional
        Sampling frequency in Hz.
    dtype : numpy dtype, optional
        Output dtype. Defaults to float64.

    Returns
    -------
    (M//2 + 1,) ndarray of non-negative values
    """
    _check_scaling(scaling)
    if scaling == "density":
        u = density_scale(window, fs)
    else:
        u = spectrum_scale(window)
    S = fold_one_sided(np.asarray(two_sided, dtype=np.float64))
    S *= u
    np.maximum(S, 0.0, out=S)
    return S.astype(dtype, copy=False)


def frequency_axis(
    nfft: int,
    scaling: str,
    fs: Optional[float] = None,
    dtype=np.float64,
) -> np.ndarray:
    """
    Frequencies of the one-sided bins k = 0 .. nfft//2.

    Hz (k * fs / nfft) for the density, normalized cycles/sample (k / nfft)
    for the power spectrum.
    """
    _check_scaling(scaling)
    nfft = int(nfft)
    if nfft < 1:
        raise ValueError(f"nfft must be >= 1, got {nfft}.")
    k = np.arange(nfft // 2 + 1, dtype=np.float64)
    if scaling == "density":
        f = k * _check_fs(fs) / nfft
    else:
        f = k / nfft
    return f.astype(dtype, copy=False)
