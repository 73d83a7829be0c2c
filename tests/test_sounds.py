"""Tests for settings, cue synthesis, the cue player and display formatting.

Covers:
- Settings dataclass defaults and JSON round-trip
- Beep WAV generation
- CuePlayer lazy acquisition, release/reacquire and failure handling
- Clock / total formatting
"""

from __future__ import annotations

import io
import json
import wave

import pytest

from looptimer.settings import Settings, load_settings, save_settings
from looptimer.audio.sounds import CuePlayer, generate_beep, SAMPLE_RATE
from looptimer.formatting import format_clock, format_total, describe_unit

from helpers import step, loop


# ═══════════════════════════════════════════════════════════════════════
#  SETTINGS
# ═══════════════════════════════════════════════════════════════════════


class TestSettingsDefaults:
    def test_tick_interval(self):
        assert Settings().tick_interval_ms == 1000

    def test_fallback_display(self):
        assert Settings().fallback_display_seconds == 10

    def test_sound(self):
        s = Settings()
        assert s.sound_enabled is True
        assert s.sound_volume == 100

    def test_names(self):
        s = Settings()
        assert s.working_sequence_name == "Current Sequence"
        assert s.library_name_prefix == "Sequence"


class TestSettingsPersistence:
    def test_round_trip(self, tmp_path, monkeypatch):
        """save → load produces identical settings."""
        path = tmp_path / "nested" / "settings.json"
        monkeypatch.setattr("looptimer.settings.SETTINGS_PATH", path)
        save_settings(Settings(sound_volume=42, tick_interval_ms=500))
        loaded = load_settings()
        assert loaded.sound_volume == 42
        assert loaded.tick_interval_ms == 500

    def test_missing_file_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            "looptimer.settings.SETTINGS_PATH",
            tmp_path / "nonexistent.json",
        )
        assert load_settings() == Settings()

    def test_invalid_json_returns_defaults(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.json"
        path.write_text("NOT VALID JSON", encoding="utf-8")
        monkeypatch.setattr("looptimer.settings.SETTINGS_PATH", path)
        assert load_settings() == Settings()

    def test_extra_keys_ignored(self, tmp_path, monkeypatch):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"sound_volume": 5, "unknown_future_key": True}), encoding="utf-8")
        monkeypatch.setattr("looptimer.settings.SETTINGS_PATH", path)
        s = load_settings()
        assert s.sound_volume == 5
        assert not hasattr(s, "unknown_future_key")


# ═══════════════════════════════════════════════════════════════════════
#  SOUND SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════


class TestBeep:
    def test_is_wav(self):
        data = generate_beep()
        assert data[:4] == b"RIFF"
        assert len(data) > 100

    def test_wav_is_parseable(self):
        with wave.open(io.BytesIO(generate_beep(duration_s=0.1)), "rb") as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == SAMPLE_RATE
            assert wf.getnframes() >= int(SAMPLE_RATE * 0.1)


# ═══════════════════════════════════════════════════════════════════════
#  CUE PLAYER
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestCuePlayer:
    def test_not_acquired_until_played(self, tmp_path):
        player = CuePlayer(sounds_dir=tmp_path)
        assert player.is_acquired is False
        assert not player.cue_path.exists()

    def test_play_acquires_and_writes_wav(self, tmp_path):
        player = CuePlayer(sounds_dir=tmp_path)
        player.play()
        assert player.is_acquired
        assert player.cue_path.stat().st_size > 100

    def test_release_then_reacquire(self, tmp_path):
        player = CuePlayer(sounds_dir=tmp_path)
        player.play()
        player.release()
        assert player.is_acquired is False
        player.play()
        assert player.is_acquired

    def test_release_without_play(self, tmp_path):
        CuePlayer(sounds_dir=tmp_path).release()

    def test_repeated_play_does_not_raise(self, tmp_path):
        player = CuePlayer(sounds_dir=tmp_path)
        for _ in range(3):
            player.play()

    def test_disabled_does_nothing(self, tmp_path):
        player = CuePlayer(sounds_dir=tmp_path)
        player.set_enabled(False)
        player.play()
        assert player.enabled is False
        assert player.is_acquired is False

    def test_volume_clamps(self, tmp_path):
        player = CuePlayer(sounds_dir=tmp_path)
        player.set_volume(200)
        assert player.volume == 100
        player.set_volume(-10)
        assert player.volume == 0

    def test_failure_is_logged_not_raised(self, tmp_path, monkeypatch, caplog):
        player = CuePlayer(sounds_dir=tmp_path)

        def broken():
            raise OSError("read-only file system")

        monkeypatch.setattr(player, "_acquire", broken)
        player.play()
        assert "Cue playback failed" in caplog.text


# ═══════════════════════════════════════════════════════════════════════
#  FORMATTING
# ═══════════════════════════════════════════════════════════════════════


class TestFormatting:
    @pytest.mark.parametrize("seconds, expected", [
        (0, "00:00"), (5, "00:05"), (90, "01:30"), (3600, "60:00"), (-3, "00:00"),
    ])
    def test_clock(self, seconds, expected):
        assert format_clock(seconds) == expected

    def test_total(self):
        assert format_total(425) == "7m 05s"

    def test_describe(self):
        assert describe_unit(step("a", 90)) == "Step 01:30"
        assert describe_unit(loop("L", 3, label="Core")) == "Loop x3 (Core)"
