"""Tests for sample-rate reconciliation."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
import scipy.io.wavfile as wavfile

from audiosprite.errors import ReconcileError, ReconcileErrorKind
from audiosprite.sprite.reconcile import (
    FfmpegResampler,
    Resampler,
    ScipyResampler,
    get_resampler,
    reconcile,
)
from audiosprite.types import AudioFormat, Clip
from audiosprite.wav import decode


def _write_wav(path: Path, data: np.ndarray, sr: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    wavfile.write(str(path), sr, data)
    return path


def _tone(frames: int, sr: int, channels: int = 1) -> np.ndarray:
    t = np.arange(frames) / sr
    mono = (np.sin(2 * np.pi * 440 * t) * 12000).astype(np.int16)
    if channels == 1:
        return mono
    return np.stack([mono] * channels, axis=1)


class RecordingResampler(Resampler):
    """Writes a silent WAV at the target rate and remembers where."""

    name = "fake"

    def __init__(self, produce_rate: int | None = None):
        self.produce_rate = produce_rate
        self.calls: list[tuple[str, int]] = []
        self.output_paths: list[Path] = []

    def resample(self, clip: Clip, output_path: Path, target_rate: int) -> Path:
        self.calls.append((clip.logical_name, target_rate))
        self.output_paths.append(output_path)
        rate = self.produce_rate or target_rate
        frames = clip.frame_count * target_rate // clip.format.sample_rate
        return _write_wav(output_path, np.zeros(frames, dtype=np.int16), rate)


class FailingResampler(Resampler):
    name = "failing"

    def __init__(self):
        self.output_paths: list[Path] = []

    def resample(self, clip: Clip, output_path: Path, target_rate: int) -> Path:
        self.output_paths.append(output_path)
        output_path.write_bytes(b"partial")
        raise subprocess.CalledProcessError(1, ["ffmpeg"], stderr="Invalid sample rate\n")


class TestReconcile:
    def test_first_clip_sets_reference(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "a.wav", _tone(100, 22050), 22050))
        out, rate = reconcile(clip, None, resampler=None)
        assert out is clip
        assert rate == 22050

    def test_matching_rate_passes_through(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "a.wav", _tone(100, 44100), 44100))
        resampler = RecordingResampler()
        out, rate = reconcile(clip, 44100, resampler)
        assert out is clip
        assert rate == 44100
        assert resampler.calls == []

    def test_mismatch_without_resampler(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "b.wav", _tone(100, 22050), 22050))
        with pytest.raises(ReconcileError) as exc:
            reconcile(clip, 44100, resampler=None)
        assert exc.value.kind is ReconcileErrorKind.RESAMPLE_UNAVAILABLE
        assert exc.value.path == tmp_path / "b.wav"

    def test_mismatch_resamples_to_reference(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "b.wav", _tone(22050, 22050), 22050))
        resampler = RecordingResampler()
        out, rate = reconcile(clip, 44100, resampler)
        assert resampler.calls == [("b", 44100)]
        assert rate == 44100
        assert out.format.sample_rate == 44100
        assert out.logical_name == "b"
        assert out.source == tmp_path / "b.wav"
        assert out.frame_count == 44100

    def test_temporary_file_removed_after_success(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "b.wav", _tone(100, 22050), 22050))
        resampler = RecordingResampler()
        reconcile(clip, 44100, resampler)
        temp_out = resampler.output_paths[0]
        assert not temp_out.exists()
        assert not temp_out.parent.exists()

    def test_backend_failure(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "b.wav", _tone(100, 22050), 22050))
        resampler = FailingResampler()
        with pytest.raises(ReconcileError) as exc:
            reconcile(clip, 44100, resampler)
        assert exc.value.kind is ReconcileErrorKind.RESAMPLE_FAILED
        assert "Invalid sample rate" in str(exc.value)
        assert not resampler.output_paths[0].parent.exists()

    def test_backend_produces_wrong_rate(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "b.wav", _tone(100, 22050), 22050))
        with pytest.raises(ReconcileError) as exc:
            reconcile(clip, 44100, RecordingResampler(produce_rate=48000))
        assert exc.value.kind is ReconcileErrorKind.RESAMPLE_FAILED


class TestScipyResampler:
    def test_upsample_mono(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "a.wav", _tone(8000, 8000), 8000))
        out_path = ScipyResampler().resample(clip, tmp_path / "out.wav", 16000)
        resampled = decode(out_path)
        assert resampled.format == AudioFormat(16000, 1, 16)
        assert resampled.frame_count == 16000
        assert resampled.samples.dtype == np.int16

    def test_preserves_channels(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "a.wav", _tone(4410, 44100, channels=2), 44100))
        out_path = ScipyResampler().resample(clip, tmp_path / "out.wav", 48000)
        resampled = decode(out_path)
        assert resampled.format.channel_count == 2
        assert resampled.frame_count == 4800

    def test_reconcile_with_scipy(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "a.wav", _tone(48000, 48000), 48000))
        out, _ = reconcile(clip, 44100, ScipyResampler())
        assert out.format.sample_rate == 44100
        assert out.frame_count == 44100


class TestFfmpegResampler:
    @patch("audiosprite.audio.resample_audio")
    def test_passes_source_and_bit_depth(self, mock_resample, tmp_path):
        clip = Clip("a", np.zeros(4, dtype=np.int32), AudioFormat(22050, 1, 32),
                    source=tmp_path / "a.wav")
        FfmpegResampler().resample(clip, tmp_path / "out.wav", 44100)
        mock_resample.assert_called_once_with(
            tmp_path / "a.wav", tmp_path / "out.wav", 44100, bit_depth=32,
        )


class TestGetResampler:
    def test_named_backends(self):
        assert isinstance(get_resampler("ffmpeg"), FfmpegResampler)
        assert isinstance(get_resampler("scipy"), ScipyResampler)

    def test_none(self):
        assert get_resampler("none") is None

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown resampler"):
            get_resampler("sox")

    def test_auto_prefers_ffmpeg(self):
        with patch("audiosprite.audio.ffmpeg_available", return_value=True):
            assert isinstance(get_resampler("auto"), FfmpegResampler)

    def test_auto_falls_back_to_scipy(self):
        with patch("audiosprite.audio.ffmpeg_available", return_value=False):
            assert isinstance(get_resampler("auto"), ScipyResampler)


class TestScipyResamplerUnsigned:
    def test_silent_8bit_stays_centred(self, tmp_path):
        silence = np.full(200, 128, dtype=np.uint8)
        clip = decode(_write_wav(tmp_path / "quiet.wav", silence, 22050))
        assert clip.format.bit_depth == 8

        resampled = decode(ScipyResampler().resample(clip, tmp_path / "out.wav", 44100))
        assert resampled.samples.dtype == np.uint8
        assert resampled.frame_count == 400
        assert (resampled.samples == 128).all()

    def test_reconcile_8bit(self, tmp_path):
        clip = decode(_write_wav(tmp_path / "blip.wav", np.full(100, 128, dtype=np.uint8), 11025))
        out, rate = reconcile(clip, 22050, ScipyResampler())
        assert rate == 22050
        assert out.format.bit_depth == 8
        assert (out.samples == 128).all()
