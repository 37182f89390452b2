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
segments.py — overlapping segmentation of the signal
-----------------------------------------------------------------------------
The signal of length N is split into K segments of length L that overlap by O
samples:

[---------------------------------------------------------------] N samples
[---------] segment 0, start 0
      [---------] segment 1, start (L - O)
            [---------] segment 2, start 2 (L - O)
                  ...
                                          [---------] segment K-1
                                                     [----] remainder < L, dropped

    K = floor((N - O) / (L - O))

Segments are views into the signal buffer; sample data is never copied.
-----------------------------------------------------------------------------
"""
__all__ = ["count_segments", "Segmenter"]

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .exceptions import ConfigurationError, InsufficientDataError
from .utils import readonly


def _check_lengths(N: int, L: int, O: int) -> None:
    if L < 1:
        raise ConfigurationError(f"Segment length must be >= 1, got {L}.")
    if L > N:
        raise ConfigurationError(
            f"Segment length {L} exceeds the signal length {N}."
        )
    if O < 0:
        raise ConfigurationError(f"Overlap must be >= 0, got {O}.")
    if O >= L:
        raise ConfigurationError(
            f"Overlap {O} must be smaller than the segment length {L}."
        )


def count_segments(N: int, L: int, O: int) -> int:
    """
    Number of full segments K = floor((N - O) / (L - O)).

    Raises ConfigurationError if the lengths violate 0 <= O < L <= N.
    """
    N, L, O = int(N), int(L), int(O)
    if N < 1:
        raise InsufficientDataError("The signal is empty.")
    _check_lengths(N, L, O)
    return (N - O) // (L - O)


class Segmenter:
    """
    Restartable, lazy sequence of the K overlapping segments of a signal.

    Parameters
    ----------
    signal : (N,) ndarray
        The signal; only a read-only view of it is kept.
    segment_length : int
        Segment length L.
    overlap : int
        Number of samples O shared by consecutive segments.

    Notes
    -----
    Iterating yields read-only views ``signal[s:s+L]`` for ``s = i * (L - O)``.
    Each iteration recomputes the offsets, so the sequence can be traversed
    any number of times with identical results.
    """

    def __init__(self, signal: np.ndarray, segment_length: int, overlap: int):
        x = np.asarray(signal)
        if x.ndim != 1:
            raise ConfigurationError("Signal must be a 1D array.")
        self._x = readonly(x)
        self.segment_length = int(segment_length)
        self.overlap = int(overlap)
        self.n_segments = count_segments(self._x.shape[0], self.segment_length, self.overlap)
        if self.n_segments < 1:
            raise InsufficientDataError(
                f"Signal of length {self._x.shape[0]} yields no full segment of "
                f"length {self.segment_length} with overlap {self.overlap}."
            )

    @property
    def step(self) -> int:
        return self.segment_length - self.overlap

    @property
    def starts(self) -> np.ndarray:
        """Start index of every segment (int64)."""
        return np.arange(self.n_segments, dtype=np.int64) * self.step

    @property
    def used_samples(self) -> int:
        """Number of leading samples covered by at least one segment."""
        return (self.n_segments - 1) * self.step + self.segment_length

    def __len__(self) -> int:
        return self.n_segments

    def __iter__(self):
        L = self.segment_length
        for s in range(0, self.n_segments * self.step, self.step):
            yield self._x[s:s + L]

    def __getitem__(self, i: int) -> np.ndarray:
        i = int(i)
        if i < 0:
            i += self.n_segments
        if not 0 <= i < self.n_segments:
            raise IndexError(f"Segment index {i} out of range for {self.n_segments} segments.")
        s = i * self.step
        return self._x[s:s + self.segment_length]

    def frames(self) -> np.ndarray:
        """
        All segments as a (K, L) strided view of the signal.

        Rows are the segments in order; no sample data is copied.
        """
        view = sliding_window_view(self._x, self.segment_length)
        return view[::self.step][: self.n_segments]

    def __repr__(self) -> str:
        return (
            f"Segmenter(N={self._x.shape[0]}, L={self.segment_length}, "
            f"O={self.overlap}, K={self.n_segments})"
        )
