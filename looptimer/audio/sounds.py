"""Transition cue synthesis and playback using numpy + QSoundEffect.

The cue is a short beep generated as a WAV file with sine-wave
synthesis and an ADSR envelope.  It is cached to disk so later
launches skip synthesis.

The single ``QSoundEffect`` handle is owned by :class:`CuePlayer`:
created on the first ``play()``, dropped by ``release()`` when the
session ends, and created again if a cue is needed after that.
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"
CUE_FILENAME = "beep.wav"

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    # Attack
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    # Decay
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    # Sustain
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    # Release
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


def generate_beep(freq: float = 880.0, duration_s: float = 0.25) -> bytes:
    """Step-change cue: a single bright beep with a quick fade."""
    tone = _sine(freq, duration_s) * 0.6 + _sine(freq * 2, duration_s) * 0.1
    env = _make_envelope(
        len(tone),
        attack=int(SAMPLE_RATE * 0.005),
        decay=int(SAMPLE_RATE * 0.05),
        sustain_level=0.6,
        release=int(SAMPLE_RATE * 0.12),
    )
    # Trailing silence so the backend does not clip the release
    padded = np.concatenate([tone * env, np.zeros(int(SAMPLE_RATE * 0.03))])
    return _to_wav_bytes(padded)


# ═══════════════════════════════════════════════════════════════════════════
#  CUE PLAYER
# ═══════════════════════════════════════════════════════════════════════════


class CuePlayer(QObject):
    """Plays the transition cue.  Never raises.

    Usage::

        cue = CuePlayer(parent=self)
        cue.set_volume(70)
        cue.play()
        ...
        cue.release()
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 1.0  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effect: QSoundEffect | None = None

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100)."""
        self._volume = max(0, min(level, 100)) / 100.0
        if self._effect is not None:
            self._effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self) -> None:
        """Play the cue from the start, cutting off one still sounding."""
        if not self._enabled:
            return
        try:
            effect = self._acquire()
            if effect.status() == QSoundEffect.Status.Error:
                logger.warning("Cue sound failed to load from %s", effect.source().toLocalFile())
                return
            if effect.isPlaying():
                effect.stop()
            effect.play()
        except Exception:
            logger.warning("Cue playback failed", exc_info=True)

    def release(self) -> None:
        """Drop the sound handle.  The next ``play()`` re-acquires it."""
        if self._effect is None:
            return
        self._effect.stop()
        self._effect.deleteLater()
        self._effect = None

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def is_acquired(self) -> bool:
        return self._effect is not None

    @property
    def cue_path(self) -> Path:
        return self._sounds_dir / CUE_FILENAME

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_file(self) -> Path:
        """Generate the cue WAV into the cache directory if missing."""
        path = self.cue_path
        if not path.exists():
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(generate_beep())
        return path

    def _acquire(self) -> QSoundEffect:
        if self._effect is None:
            path = self._ensure_wav_file()
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(self._volume)
            self._effect = effect
        return self._effect
