"""
Signal processing primitives for velocity and deviation sequences.

These are best-effort smoothing and spectral tools; none of them attempt to
be a drop-in replacement for a full DSP library. Every function accepts a
plain sequence of floats and returns plain Python lists or floats.
"""

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np


def gaussian_smooth(data: Sequence[float], sigma: float = 1.0) -> List[float]:
    """
    Smooth a sequence with a normalized Gaussian kernel.

    The kernel radius is ``ceil(3 * sigma)``. Near the edges the kernel is
    truncated and renormalized so the output keeps the input's scale.
    """
    if len(data) == 0:
        return []
    if sigma <= 0:
        return [float(v) for v in data]

    radius = int(math.ceil(3 * sigma))
    offsets = np.arange(-radius, radius + 1)
    kernel = np.exp(-(offsets ** 2) / (2 * sigma * sigma))
    kernel /= kernel.sum()

    values = np.asarray(data, dtype=float)
    n = len(values)
    result = []
    for i in range(n):
        start = max(0, i - radius)
        end = min(n, i + radius + 1)
        weights = kernel[start - i + radius:end - i + radius]
        result.append(float(np.dot(values[start:end], weights) / weights.sum()))
    return result


def savitzky_golay_filter(data: Sequence[float], window_size: int = 5) -> List[float]:
    """
    Centered moving-window smoother in the Savitzky-Golay style.

    Even window sizes are bumped to the next odd size. The window is
    truncated at the sequence edges, so the output has the input's length.
    """
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")
    if len(data) == 0:
        return []
    if window_size % 2 == 0:
        window_size += 1

    half = window_size // 2
    values = np.asarray(data, dtype=float)
    result = []
    for i in range(len(values)):
        start = max(0, i - half)
        end = min(len(values), i + half + 1)
        result.append(float(values[start:end].mean()))
    return result


def power_spectral_density(signal: Sequence[float], sampling_rate: float) -> Tuple[List[float], List[float]]:
    """
    One-sided periodogram computed with a direct discrete Fourier transform.

    Args:
        signal: Evenly sampled values.
        sampling_rate: Samples per second.

    Returns:
        ``(frequencies, psd)`` for bins ``k < n // 2`` where
        ``frequency = k * sampling_rate / n`` and ``psd = (|X_k| / n) ** 2``.
    """
    n = len(signal)
    if n == 0:
        return [], []

    values = np.asarray(signal, dtype=float)
    k = np.arange(n // 2)
    i = np.arange(n)
    angles = -2 * np.pi * np.outer(k, i) / n
    real = (np.cos(angles) * values).sum(axis=1)
    imag = (np.sin(angles) * values).sum(axis=1)
    magnitude = np.sqrt(real ** 2 + imag ** 2) / n

    frequencies = (k * sampling_rate / n).tolist()
    return frequencies, (magnitude ** 2).tolist()


def dominant_frequency(signal: Sequence[float], sampling_rate: float,
                       band: Optional[Tuple[float, float]] = None) -> Tuple[float, float]:
    """
    Frequency bin with the highest spectral power, optionally within a band.

    Returns ``(frequency, power)``; ``(0.0, 0.0)`` when no bin has positive power.
    """
    frequencies, psd = power_spectral_density(signal, sampling_rate)
    best_freq = 0.0
    best_power = 0.0
    for freq, power in zip(frequencies, psd):
        if band is not None and not (band[0] <= freq <= band[1]):
            continue
        if power > best_power:
            best_power = power
            best_freq = freq
    return best_freq, best_power


def low_pass_filter(data: Sequence[float], cutoff_freq: float, sampling_rate: float) -> List[float]:
    """First-order RC low-pass filter."""
    if len(data) == 0:
        return []
    rc = 1.0 / (cutoff_freq * 2 * math.pi)
    dt = 1.0 / sampling_rate
    alpha = dt / (rc + dt)

    filtered = [float(data[0])]
    for value in data[1:]:
        filtered.append(filtered[-1] + alpha * (value - filtered[-1]))
    return filtered


def high_pass_filter(data: Sequence[float], cutoff_freq: float, sampling_rate: float) -> List[float]:
    """First-order RC high-pass filter, used to strip slow drift."""
    if len(data) == 0:
        return []
    rc = 1.0 / (cutoff_freq * 2 * math.pi)
    dt = 1.0 / sampling_rate
    alpha = rc / (rc + dt)

    filtered = [float(data[0])]
    for i in range(1, len(data)):
        filtered.append(alpha * (filtered[-1] + data[i] - data[i - 1]))
    return filtered


def zero_crossing_rate(signal: Sequence[float]) -> float:
    """Fraction of consecutive sample pairs whose sign changes."""
    if len(signal) < 2:
        return 0.0
    crossings = 0
    for i in range(1, len(signal)):
        if (signal[i] >= 0) != (signal[i - 1] >= 0):
            crossings += 1
    return crossings / (len(signal) - 1)


def autocorrelation(signal: Sequence[float], lag: int) -> float:
    """Normalized autocorrelation at ``lag``; 0.0 for flat or too-short signals."""
    if lag < 0 or len(signal) <= lag:
        return 0.0
    values = np.asarray(signal, dtype=float)
    centered = values - values.mean()
    denominator = float(np.sum(centered ** 2))
    if denominator == 0:
        return 0.0
    numerator = float(np.sum(centered[:len(values) - lag] * centered[lag:]))
    return numerator / denominator


def spectral_entropy(signal: Sequence[float], sampling_rate: float) -> float:
    """Shannon entropy (bits) of the normalized power spectrum."""
    _, psd = power_spectral_density(signal, sampling_rate)
    total = sum(psd)
    if total == 0:
        return 0.0
    entropy = 0.0
    for power in psd:
        p = power / total
        if p > 0:
            entropy -= p * math.log2(p)
    return entropy
