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

from welchkit import (
    ConfigurationError,
    InsufficientDataError,
    WelchConfig,
    default_segment_length,
    format_summary,
    resolve_config,
)
from welchkit.utils import chunker, nearest_power_of_two, next_power_of_two, round_half_up


@pytest.mark.parametrize(
    "N, expected",
    [
        (1_000, 128),      # N/8 = 125 -> 128
        (10_000, 1024),    # N/8 = 1250 -> 1024
        (10**6, 4096),     # capped by max_segment_length
        (100, 16),         # N/8 = 12.5 -> 16
        (10, 10),          # shorter than the minimum length
        (1, 1),
    ],
)
def test_default_segment_length(N, expected):
    assert default_segment_length(N) == expected


def test_default_segment_length_bounds():
    assert default_segment_length(10**6, max_segment_length=None) == 131072
    assert default_segment_length(10**6, max_segment_length=1000) == 1000
    with pytest.raises(InsufficientDataError):
        default_segment_length(0)


def test_resolve_defaults():
    cfg, win = resolve_config(1000, scaling="density", fs=10.0)
    assert isinstance(cfg, WelchConfig)
    assert cfg.segment_length == 128
    assert cfg.overlap == 64
    assert cfg.n_segments == (1000 - 64) // 64
    assert cfg.nfft == 128
    assert cfg.window == "hann"
    assert cfg.fs == 10.0
    assert len(win) == 128


def test_resolve_overlap_forms():
    cfg, _ = resolve_config(1000, scaling="spectrum", segment_length=100, overlap=30)
    assert cfg.overlap == 30
    cfg, _ = resolve_config(1000, scaling="spectrum", segment_length=100, overlap=0.25)
    assert cfg.overlap == 25
    cfg, _ = resolve_config(1000, scaling="spectrum", segment_length=100, overlap=np.int64(0))
    assert cfg.overlap == 0
    # fractions that would round up to L are clamped to L - 1
    cfg, _ = resolve_config(10, scaling="spectrum", segment_length=1, overlap=0.5)
    assert cfg.overlap == 0
    assert cfg.n_segments == 10
    with pytest.raises(ConfigurationError):
        resolve_config(1000, scaling="spectrum", segment_length=100, overlap=1.0)
    with pytest.raises(ConfigurationError):
        resolve_config(1000, scaling="spectrum", segment_length=100, overlap=100)
    with pytest.raises(ConfigurationError):
        resolve_config(1000, scaling="spectrum", segment_length=100, overlap=-1)
    with pytest.raises(TypeError):
        resolve_config(1000, scaling="spectrum", segment_length=100, overlap="half")


def test_resolve_n_segments():
    # L = trunc(N / (K (1 - a) + a))
    cfg, _ = resolve_config(1000, scaling="spectrum", n_segments=4, overlap=0.5)
    assert cfg.segment_length == 400
    assert cfg.n_segments == 4
    cfg, _ = resolve_config(1000, scaling="spectrum", n_segments=10, overlap=0)
    assert cfg.segment_length == 100
    assert cfg.n_segments == 10
    with pytest.raises(ConfigurationError):
        resolve_config(1000, scaling="spectrum", n_segments=0)
    with pytest.raises(InsufficientDataError):
        resolve_config(3, scaling="spectrum", n_segments=10, overlap=0)


def test_resolve_nfft():
    cfg, _ = resolve_config(1000, scaling="spectrum", segment_length=400, nfft="pow2")
    assert cfg.nfft == 512
    cfg, _ = resolve_config(1000, scaling="spectrum", segment_length=400, nfft=1000)
    assert cfg.nfft == 1000
    with pytest.raises(ConfigurationError):
        resolve_config(1000, scaling="spectrum", segment_length=400, nfft=300)
    with pytest.raises(ConfigurationError):
        resolve_config(1000, scaling="spectrum", segment_length=400, nfft="fast")


@pytest.mark.parametrize("fs", [0.0, -1.0, np.inf, np.nan, None])
def test_density_requires_positive_fs(fs):
    with pytest.raises(ConfigurationError):
        resolve_config(1000, scaling="density", fs=fs)


def test_spectrum_ignores_fs():
    cfg, _ = resolve_config(1000, scaling="spectrum", fs=5.0)
    assert cfg.fs is None


def test_segment_length_errors():
    with pytest.raises(ConfigurationError):
        resolve_config(100, scaling="spectrum", segment_length=101)
    with pytest.raises(ConfigurationError):
        resolve_config(100, scaling="spectrum", segment_length=0)
    with pytest.raises(TypeError):
        resolve_config(100, scaling="spectrum", segment_length=10.0)
    with pytest.raises(ConfigurationError):
        resolve_config(100, scaling="spectrum", window="nope")
    with pytest.raises(ConfigurationError):
        resolve_config(100, scaling="power")
    with pytest.raises(InsufficientDataError):
        resolve_config(0, scaling="spectrum")


def test_format_summary():
    cfg, _ = resolve_config(10_000, scaling="density", fs=1000.0, segment_length=1000)
    text = format_summary(cfg)
    assert text.splitlines()[0] == "Welch spectral density estimator:"
    assert "hann" in text
    assert "19" in text  # number of segments
    assert "frequency resolution" in text
    assert "1 Hz" in text

    cfg, _ = resolve_config(10_000, scaling="spectrum", segment_length=1000)
    text = format_summary(cfg)
    assert text.splitlines()[0] == "Welch power spectrum estimator:"
    assert "frequency resolution" not in text


def test_utils():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert next_power_of_two(1) == 1
    assert next_power_of_two(400) == 512
    assert next_power_of_two(512) == 512
    assert nearest_power_of_two(125) == 128
    assert nearest_power_of_two(0.3) == 1
    assert chunker(range(10), 4) == [range(0, 4), range(4, 8), range(8, 10)]
    with pytest.raises(ValueError):
        chunker(range(10), 0)
