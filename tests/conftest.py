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


@pytest.fixture
def rng():
    """Seeded random generator shared by the tests."""
    return np.random.default_rng(seed=1)


@pytest.fixture
def short_white_noise_data(rng):
    """Zero-mean Gaussian noise, 20k samples, variance 4."""
    sigma = 2.0
    return {
        "data": sigma * rng.normal(size=20_000),
        "fs": 100.0,
        "variance": sigma**2,
    }


@pytest.fixture
def sinusoid_data(rng):
    """
    Bin-centred sinusoid in low-level noise.

    With L = 1000 and fs = 10 kHz the bin spacing is 10 Hz and f0 = 1550 Hz
    falls exactly on bin 155.
    """
    fs = 10e3
    n = 100_000
    amp = 2.0 * np.sqrt(2.0)
    f0 = 1550.0
    t = np.arange(n) / fs
    data = amp * np.sin(2.0 * np.pi * f0 * t) + 1e-3 * rng.normal(size=n)
    return {"data": data, "fs": fs, "amp": amp, "f0": f0, "L": 1000}
