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
"""Human-readable description of a resolved Welch configuration."""

__all__ = ["format_summary"]

_TITLES = {
    "density": "Welch spectral density estimator:",
    "spectrum": "Welch power spectrum estimator:",
}


def format_summary(config) -> str:
    """
    Format a resolved configuration (a WelchConfig) as a multi-line string.

    The frequency resolution line is only present for the spectral density,
    where a sampling frequency is known.
    """
    L = config.segment_length
    O = config.overlap
    lines = [
        _TITLES.get(config.scaling, "Welch estimator:"),
        f" - window              : {config.window:>8}",
        f" - number of segments  : {config.n_segments:>8d}",
        f" - segment length      : {L:>8d}",
        f" - overlap             : {O:>8d} ({100.0 * O / L:.1f}%)",
        f" - dft size            : {config.nfft:>8d}",
    ]
    if config.scaling == "density":
        lines.append(f" - sampling frequency  : {config.fs:>8g} Hz")
        lines.append(f" - frequency resolution: {config.fs / config.nfft:>8g} Hz")
    return "\n".join(lines)
