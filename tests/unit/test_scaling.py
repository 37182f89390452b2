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
import pytest
import numpy as np

from welchkit.scaling import (
    density_scale,
    fold_one_sided,
    frequency_axis,
    scale_periodogram,
    spectrum_scale,
)
from welchkit.windows import get_window


def test_fold_even():
    P = np.array([1.0, 2.0, 3.0, 4.0, 3.0, 2.0])
    np.testing.assert_array_equal(fold_one_sided(P), [1.0, 4.0, 6.0, 4.0])


def test_fold_odd():
    P = np.array([1.0, 2.0, 3.0, 3.0, 2.0])
    np.testing.assert_array_equal(fold_one_sided(P), [1.0, 4.0, 6.0])


@pytest.mark.parametrize("M", [1, 2, 3])
def test_fold_small(M):
    P = np.ones(M)
    S = fold_one_sided(P)
    assert S.shape == (M // 2 + 1,)
    assert S[0] == 1.0
    if M == 2:
        assert S[1] == 1.0
    if M == 3:
        assert S[1] == 2.0


def test_fold_does_not_modify_input():
    P = np.ones(8)
    fold_one_sided(P)
    np.testing.assert_array_equal(P, np.ones(8))


def test_scales():
    win = get_window("hann", 64)
    assert density_scale(win, 100.0) == pytest.approx(1.0 / (100.0 * win.sum_sq))
    assert spectrum_scale(win) == pytest.approx(1.0 / win.sum**2)
    with pytest.raises(ValueError):
        density_scale(win, 0.0)
    with pytest.raises(ValueError):
        density_scale(win, None)


def test_scale_periodogram():
    win = get_window("rectangular", 8)
    P = np.full(8, 16.0)
    S = scale_periodogram(P, win, "spectrum", dtype=np.float32)
    assert S.dtype == np.float32
    np.testing.assert_allclose(S, [0.25, 0.5, 0.5, 0.5, 0.25])
    D = scale_periodogram(P, win, "density", fs=2.0)
    np.testing.assert_allclose(D, [1.0, 2.0, 2.0, 2.0, 1.0])
    with pytest.raises(ValueError):
        scale_periodogram(P, win, "amplitude")


def test_scale_periodogram_non_negative():
    win = get_window("rectangular", 4)
    S = scale_periodogram(np.array([1.0, -1e-30, 0.0, 1.0]), win, "spectrum")
    assert np.all(S >= 0.0)


def test_frequency_axis():
    f = frequency_axis(8, "density", fs=100.0)
    np.testing.assert_allclose(f, [0.0, 12.5, 25.0, 37.5, 50.0])
    g = frequency_axis(8, "spectrum")
    np.testing.assert_allclose(g, [0.0, 0.125, 0.25, 0.375, 0.5])
    h = frequency_axis(7, "spectrum", dtype=np.float32)
    assert h.shape == (4,)
    assert h.dtype == np.float32
    assert h[-1] < 0.5
    with pytest.raises(ValueError):
        frequency_axis(8, "density")
