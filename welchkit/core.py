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
core.py — windowed transforms and periodogram accumulation
-----------------------------------------------------------------------------
Design notes
- Transforms use scipy.fft (pocketfft): O(L log L) for every length, single
  precision input stays single precision (float32 -> complex64).
- Segments are transformed in fixed-order blocks taken from a strided (K, L)
  view of the signal; only the windowed block is materialized.
- The squared-magnitude running sum is a Numba kernel parallel over bins.
  Each bin accumulates its segments strictly in segment order into a float64
  accumulator, so the result does not depend on the thread count or on the
  block size.
- The workqueue threading layer rejects concurrent parallel launches, so
  kernel calls are serialized with a module lock. FFT blocks still run
  concurrently across Python threads.
- A pure-NumPy reducer is provided for verification.
-----------------------------------------------------------------------------
"""
__all__ = [
    "windowed_dft",
    "accumulate_periodogram",
    "default_batch_size",
    # kernels
    "_windowed_dft_batch",
    "_accumulate_power",
    "_accumulate_power_np",
]

import threading
from typing import Optional

import numpy as np
import scipy.fft as sp_fft
from numba import njit, prange

from ._config import BATCH_ELEMENTS
from .segments import Segmenter
from .utils import chunker

_kernel_lock = threading.Lock()


def _float_dtype(x: np.ndarray):
    """float32 stays float32, everything else is promoted to float64."""
    if x.dtype == np.float32:
        return np.float32
    return np.float64


# Transform engine -------------------------------------------------------------

def windowed_dft(
    segment: np.ndarray,
    weights: np.ndarray,
    nfft: Optional[int] = None,
    workers: Optional[int] = None,
) -> np.ndarray:
    """
    Taper one segment and return its discrete Fourier transform.

    Parameters
    ----------
    segment : (L,) ndarray
        Real segment samples.
    weights : (L,) ndarray
        Window coefficients.
    nfft : int, optional
        Transform length; values above L zero-pad the tapered segment.
        Defaults to L.
    workers : int, optional
        Threads used by scipy.fft.

    Returns
    -------
    X : (nfft,) complex ndarray
        complex64 for float32 input, complex128 otherwise.
    """
    seg = np.asarray(segment)
    w = np.asarray(weights)
    if seg.ndim != 1 or seg.shape != w.shape:
        raise ValueError(
            f"Segment shape {seg.shape} does not match window shape {w.shape}."
        )
    dtype = _float_dtype(seg)
    v = seg.astype(dtype, copy=False) * w.astype(dtype, copy=False)
    return sp_fft.fft(v, n=nfft, workers=workers, overwrite_x=True)


def _windowed_dft_batch(
    frames: np.ndarray,
    weights: np.ndarray,
    nfft: int,
    workers: Optional[int] = None,
) -> np.ndarray:
    """
    Taper and transform a (B, L) block of segments along the last axis.
    """
    dtype = _float_dtype(frames)
    block = frames * weights.astype(dtype, copy=False)
    return sp_fft.fft(block, n=nfft, axis=-1, workers=workers, overwrite_x=True)


# Accumulator kernels ----------------------------------------------------------

@njit(parallel=True, cache=True)
def _accumulate_power(spectra, acc):
    """
    acc[k] += sum_j |spectra[j, k]|^2, adding segments j in order.

    Parameters
    ----------
    spectra : (B, M) complex ndarray
        Transforms of B segments.
    acc : (M,) float64 ndarray
        Running sum, updated in place.
    """
    B = spectra.shape[0]
    M = spectra.shape[1]
    for k in prange(M):
        a = acc[k]
        for j in range(B):
            v = spectra[j, k]
            re = np.float64(v.real)
            im = np.float64(v.imag)
            a += re * re + im * im
        acc[k] = a


def _accumulate_power_np(spectra: np.ndarray, acc: np.ndarray) -> None:
    """
    NumPy reducer: same contract as _accumulate_power (pairwise summation,
    so results agree to rounding only).
    """
    re = spectra.real.astype(np.float64)
    im = spectra.imag.astype(np.float64)
    acc += np.sum(re * re + im * im, axis=0)


def default_batch_size(nfft: int) -> int:
    """Segments per FFT block so one block holds about BATCH_ELEMENTS values."""
    return max(1, BATCH_ELEMENTS // max(1, int(nfft)))


def accumulate_periodogram(
    segmenter: Segmenter,
    weights: np.ndarray,
    nfft: Optional[int] = None,
    workers: Optional[int] = None,
    batch_size: Optional[int] = None,
) -> np.ndarray:
    """
    Mean two-sided modified periodogram over all segments.

    Parameters
    ----------
    segmenter : Segmenter
        Source of the K segments.
    weights : (L,) ndarray
        Window coefficients.
    nfft : int, optional
        Transform length (>= L). Defaults to L.
    workers : int, optional
        Threads used by scipy.fft for each block.
    batch_size : int, optional
        Segments transformed per block. Defaults to default_batch_size(nfft).

    Returns
    -------
    P : (nfft,) float64 ndarray
        sum_k |X_k|^2 / K, unscaled and two-sided.
    """
    L = segmenter.segment_length
    w = np.asarray(weights)
    if w.shape != (L,):
        raise ValueError(f"Window length {w.shape} != segment length {L}.")
    nfft = L if nfft is None else int(nfft)
    if nfft < L:
        raise ValueError(f"nfft={nfft} must be >= segment length {L}.")
    if batch_size is None:
        batch_size = default_batch_size(nfft)

    K = len(segmenter)
    frames = segmenter.frames()
    acc = np.zeros(nfft, dtype=np.float64)
    for block in chunker(range(K), int(batch_size)):
        spectra = _windowed_dft_batch(frames[block.start:block.stop], w, nfft, workers)
        with _kernel_lock:
            _accumulate_power(spectra, acc)
    acc /= K
    return acc
