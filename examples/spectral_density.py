# spectral_density.py
#
# Spectral density and power spectrum of a sinusoid in white noise.

import logging

import numpy as np

from welchkit import PowerSpectrum, SpectralDensity

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def main():
    fs = 10e3
    N = 100_000
    amp = 2.0 * np.sqrt(2.0)
    f0 = 1234.0
    rng = np.random.default_rng(42)
    t = np.arange(N) / fs
    x = amp * np.sin(2.0 * np.pi * f0 * t) + 1e-3 * rng.normal(size=N)

    sd = SpectralDensity(x, fs, segment_length=1000, verbose=True)
    print(sd)
    result = sd.compute()
    f_peak, psd_peak = result.peak()
    print(f"PSD peak: {psd_peak:.6g} V^2/Hz at {f_peak:.1f} Hz")
    print(f"RMS (1-2 kHz): {result.get_rms(pass_band=(1e3, 2e3)):.6g} V")

    ps = PowerSpectrum.builder(x, segment_length=1000, window="hann")
    print(ps)
    f_peak, ps_peak = ps.compute().peak()
    print(f"PS peak: {ps_peak:.6g} V^2 at {f_peak:.4f} cycles/sample")


if __name__ == "__main__":
    main()
