# white_noise.py
#
# Checks that the Welch estimates of white noise recover its variance.

import numpy as np

from welchkit import welch


def main():
    sigma = 0.5
    fs = 1.0
    x = sigma * np.random.default_rng(7).normal(size=10**6)

    for window in ("rectangular", "hann", "blackman"):
        result = welch(x, fs, window=window)
        print(
            f"{window:>12}: L={result.config.segment_length}, "
            f"K={result.navg}, total power {result.total_power():.5f} "
            f"(variance {sigma**2:.5f})"
        )

    ps = welch(x, window="rectangular")
    print(ps.to_dataframe().describe())


if __name__ == "__main__":
    main()
