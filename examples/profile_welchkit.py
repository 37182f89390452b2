# profile_welchkit.py

import numpy as np
import cProfile
import pstats

from welchkit.analysis import compute_spectral_density


def main():
    """Profiles one spectral density estimate of a long record."""
    print("Setting up profiling workload...")

    # --- 1. Long white-noise record, default segmentation ---
    N = int(1e7)
    fs = 2.0
    data = np.random.default_rng(0).normal(size=N)

    print(f"Profiling compute_spectral_density on a time series of length {N}...")

    # --- 2. Run under cProfile ---
    # The first call includes Numba compilation unless the cache is warm.
    command = "compute_spectral_density(data, fs, window='hann', overlap=0.5, workers=-1)"
    profiler_context = {
        "compute_spectral_density": compute_spectral_density,
        "data": data,
        "fs": fs,
    }
    cProfile.runctx(
        command, globals=profiler_context, locals={}, filename="welchkit_profile.prof"
    )

    print("Profiling complete. Stats saved to 'welchkit_profile.prof'")

    # --- 3. Print a summary to the console ---
    print("\n--- Top 10 Functions by Cumulative Time ---")
    stats = pstats.Stats("welchkit_profile.prof")
    stats.sort_stats("cumulative").print_stats(10)


if __name__ == "__main__":
    main()
