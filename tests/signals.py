"""
Synthetic test signals.
"""
import numpy as np
from scipy import signal


SAMPLE_RATE = 48000


def gen_silence(duration_sec=5.0, sample_rate=SAMPLE_RATE, n_ch=2):
    return np.zeros((n_ch, int(duration_sec * sample_rate)))


def gen_sine(freq=1000.0, amp=0.5, duration_sec=3.0, sample_rate=SAMPLE_RATE, n_ch=2):
    n = np.arange(int(duration_sec * sample_rate))
    tone = amp * np.sin(2 * np.pi * freq * n / sample_rate)
    return np.tile(tone, (n_ch, 1))


def gen_noise(amp=0.25, duration_sec=5.0, sample_rate=SAMPLE_RATE, n_ch=2, seed=1234):
    """Uniform noise band-limited to 100 Hz - 10 kHz."""
    rng = np.random.default_rng(seed)
    raw = amp * rng.uniform(-1.0, 1.0, size=(n_ch, int(duration_sec * sample_rate)))
    sos = signal.butter(4, [100.0, 10000.0], btype="bandpass", fs=sample_rate, output="sos")
    return signal.sosfilt(sos, raw, axis=-1)


def gen_fade_music_like(duration_sec=8.0, sample_rate=SAMPLE_RATE, n_ch=2):
    """Three harmonics with 1.5 s linear fade-in and fade-out."""
    t = np.arange(int(duration_sec * sample_rate)) / sample_rate
    env = np.clip(np.minimum(t / 1.5, (duration_sec - t) / 1.5), 0.0, 1.0)
    tone = (
        0.4 * np.sin(2 * np.pi * 220 * t)
        + 0.25 * np.sin(2 * np.pi * 440 * t)
        + 0.15 * np.sin(2 * np.pi * 880 * t)
    )
    return np.tile(env * tone, (n_ch, 1))


