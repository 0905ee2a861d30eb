"""Piano-like tone synthesis for practice playback.

Additive synthesis (a few decaying harmonics) with a short attack and
release. This is a practice tone, not an instrument model.
"""

from typing import List, Optional, Tuple

import numpy as np

from mncore.audio import DEFAULT_SAMPLE_RATE, write_wav_bytes
from mnmelody.pitch import Pitch


class PianoSynth:
    """Synthesize single piano-like notes."""

    # (harmonic multiple, amplitude, decay rate per second)
    HARMONICS: Tuple[Tuple[int, float, float], ...] = (
        (1, 0.6, 3.0),
        (2, 0.25, 4.5),
        (3, 0.1, 6.0),
        (4, 0.05, 8.0),
    )

    def __init__(self, sample_rate: int = DEFAULT_SAMPLE_RATE, attack: float = 0.005, release: float = 0.05):
        self.sample_rate = sample_rate
        self.attack = attack
        self.release = release

    def generate_note(self, pitch: Pitch, duration: float) -> np.ndarray:
        """Generate one note.

        Args:
            pitch: Pitch to sound
            duration: Held duration in seconds; the release tail is added after it

        Returns:
            Note as float32 array (normalized -1 to 1)
        """
        samples = int((duration + self.release) * self.sample_rate)
        t = np.arange(samples) / self.sample_rate
        freq = pitch.frequency

        phase = 2 * np.pi * freq * t
        tone = np.zeros(samples)
        for multiple, amplitude, decay in self.HARMONICS:
            tone += amplitude * np.sin(multiple * phase) * np.exp(-decay * t)

        envelope = np.ones(samples)

        # Attack
        attack_samples = min(int(self.attack * self.sample_rate), samples)
        envelope[:attack_samples] = np.linspace(0, 1, attack_samples)

        # Release
        release_samples = min(int(self.release * self.sample_rate), samples - attack_samples)
        if release_samples > 0:
            envelope[-release_samples:] = np.linspace(1, 0, release_samples)

        note = tone * envelope

        # Normalize
        peak = np.max(np.abs(note)) if samples else 0.0
        if peak > 0:
            note = note / peak

        return note.astype(np.float32)


class BufferPlayer:
    """Playback collaborator that mixes scheduled notes into a buffer."""

    def __init__(self, synth: Optional[PianoSynth] = None, gain: float = 0.5):
        self.synth = synth or PianoSynth()
        self.gain = gain
        self._notes: List[Tuple[int, np.ndarray]] = []

    @property
    def sample_rate(self) -> int:
        return self.synth.sample_rate

    def schedule_note(self, pitch: Pitch, duration_seconds: float, at_offset_seconds: float) -> None:
        start = int(round(at_offset_seconds * self.sample_rate))
        self._notes.append((start, self.synth.generate_note(pitch, duration_seconds)))

    def render(self) -> np.ndarray:
        """Mix all scheduled notes into one float32 buffer."""
        if not self._notes:
            return np.zeros(0, dtype=np.float32)

        length = max(start + len(note) for start, note in self._notes)
        mix = np.zeros(length)
        for start, note in self._notes:
            mix[start:start + len(note)] += note * self.gain

        peak = np.max(np.abs(mix))
        if peak > 1.0:
            mix = mix / peak
        return mix.astype(np.float32)


def to_wav_bytes(audio: np.ndarray, sample_rate: int = DEFAULT_SAMPLE_RATE) -> bytes:
    """Encode a mixed buffer as 24-bit WAV."""
    return write_wav_bytes(audio, sample_rate)


__all__ = ["PianoSynth", "BufferPlayer", "to_wav_bytes"]
