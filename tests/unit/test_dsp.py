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
from pytest import approx

import numpy as np

from welchkit import dsp


# --- Tests for crop_data ---


def test_crop_data():
    x = np.arange(10.0)
    y = 2.0 * x
    xc, yc = dsp.crop_data(x, y, 2.5, 6.0)
    np.testing.assert_array_equal(xc, [3.0, 4.0, 5.0, 6.0])
    np.testing.assert_array_equal(yc, [6.0, 8.0, 10.0, 12.0])


# --- Tests for integral_rms ---


def test_integral_rms_flat_asd():
    """A flat ASD of level a over a band B integrates to a * sqrt(B)."""
    f = np.linspace(0.0, 100.0, 1001)
    asd = np.full_like(f, 0.5)
    assert dsp.integral_rms(f, asd) == approx(0.5 * np.sqrt(100.0))
    assert dsp.integral_rms(f, asd, pass_band=(10.0, 35.0)) == approx(0.5 * np.sqrt(25.0))


def test_integral_rms_empty_band():
    f = np.linspace(0.0, 1.0, 11)
    assert dsp.integral_rms(f, np.ones_like(f), pass_band=(5.0, 6.0)) == 0.0


# --- Tests for parseval_power ---


def test_parseval_power():
    values = np.array([1.0, 2.0, 2.0, 1.0])
    assert dsp.parseval_power(values, df=0.5) == approx(3.0)
    assert dsp.parseval_power(values) == approx(6.0)
    assert dsp.parseval_power(values, enbw_bins=1.5) == approx(4.0)


@pytest.mark.parametrize("dtype", [np.float32, np.float64])
def test_parseval_power_accumulates_in_double(dtype):
    values = np.full(10_000, 0.1, dtype=dtype)
    assert isinstance(dsp.parseval_power(values), float)
    assert dsp.parseval_power(values) == approx(1000.0, rel=1e-6)
