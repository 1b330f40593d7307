"""Tests for SATB voice classification."""

import pytest

from score_scanner.core import ClassifiedNote, ContractViolation, Voice
from score_scanner.classification import (
    all_voices,
    channel_for_voice,
    classify,
    classify_all,
    dominant_voice,
    notes_by_voice,
    pitch_from_staff_position,
    voice_for_channel,
    voice_range,
)


class TestPitchRanges:
    """Primary classification by pitch range."""

    @pytest.mark.parametrize("pitch", range(72, 97))
    def test_soprano_range(self, detection, pitch):
        assert classify(detection(pitch)).voice == Voice.SOPRANO

    @pytest.mark.parametrize("pitch", [71, 97])
    def test_soprano_boundaries_excluded(self, detection, pitch):
        assert classify(detection(pitch)).voice != Voice.SOPRANO

    def test_overlaps_resolve_upward(self, detection):
        assert classify(detection(72)).voice == Voice.SOPRANO
        assert classify(detection(60)).voice == Voice.ALTO
        assert classify(detection(48)).voice == Voice.TENOR

    def test_representative_pitches(self, detection):
        assert classify(detection(65)).voice == Voice.ALTO
        assert classify(detection(50)).voice == Voice.TENOR
        assert classify(detection(40)).voice == Voice.BASS

    def test_above_soprano_range(self, detection):
        # 97 is outside every range
        assert classify(detection(97)).voice == Voice.BASS

    def test_below_bass_range_defaults_to_bass(self, detection):
        assert classify(detection(20)).voice == Voice.BASS


class TestClamping:
    """Out-of-range pitches are clamped, never rejected."""

    def test_high_pitch_clamped(self, detection):
        note = classify(detection(200))
        assert note.pitch == 127
        assert note.voice == Voice.BASS

    def test_negative_pitch_clamped(self, detection):
        note = classify(detection(-5))
        assert note.pitch == 0
        assert note.voice == Voice.BASS


class TestPositionHint:
    """Staff position refinement overrides the pitch result."""

    @pytest.mark.parametrize("pitch", [40, 50, 65, 80])
    def test_position_two_is_soprano(self, detection, pitch):
        assert classify(detection(pitch, position_hint=2)).voice == Voice.SOPRANO

    @pytest.mark.parametrize(
        "position,voice",
        [
            (-1, Voice.SOPRANO),
            (0, Voice.SOPRANO),
            (3, Voice.ALTO),
            (4, Voice.ALTO),
            (5, Voice.TENOR),
            (7, Voice.TENOR),
            (8, Voice.BASS),
            (12, Voice.BASS),
        ],
    )
    def test_position_bands(self, detection, position, voice):
        assert classify(detection(80, position_hint=position)).voice == voice

    def test_channel_follows_refined_voice(self, detection):
        note = classify(detection(80, position_hint=9))
        assert note.voice == Voice.BASS
        assert note.channel == 3


class TestClassifiedNote:
    def test_channels(self, detection):
        assert classify(detection(80)).channel == 0
        assert classify(detection(65)).channel == 1
        assert classify(detection(50)).channel == 2
        assert classify(detection(40)).channel == 3

    def test_fields_carried_over(self, detection):
        raw = detection(65, confidence=0.7, duration=2.0, timestamp=1.5, x=12, y=24)
        note = classify(raw)
        assert note.confidence == 0.7
        assert note.duration == 2.0
        assert note.timestamp == 1.5
        assert (note.x, note.y) == (12, 24)

    def test_mismatched_channel_rejected(self):
        with pytest.raises(ContractViolation):
            ClassifiedNote(pitch=60, confidence=1.0, voice=Voice.ALTO, channel=3)

    def test_classify_all_preserves_order_and_length(self, detection):
        raws = [detection(p) for p in (40, 80, 65, 50, 200)]
        notes = classify_all(raws)
        assert len(notes) == len(raws)
        assert [n.pitch for n in notes] == [40, 80, 65, 50, 127]

    def test_classify_all_empty(self):
        assert classify_all([]) == []


class TestVoiceHelpers:
    def test_voice_tables(self):
        assert all_voices() == [Voice.SOPRANO, Voice.ALTO, Voice.TENOR, Voice.BASS]
        assert voice_range(Voice.TENOR) == (48, 72)
        assert channel_for_voice(Voice.ALTO) == 1
        assert voice_for_channel(2) == Voice.TENOR

    def test_unknown_channel(self):
        with pytest.raises(ContractViolation):
            voice_for_channel(9)

    def test_notes_by_voice(self, detection):
        notes = classify_all([detection(80), detection(40), detection(85)])
        assert [n.pitch for n in notes_by_voice(notes, Voice.SOPRANO)] == [80, 85]

    def test_dominant_voice(self, detection):
        notes = classify_all([detection(40), detection(40), detection(80)])
        assert dominant_voice(notes) == Voice.BASS

    def test_dominant_voice_tie_prefers_higher(self, detection):
        notes = classify_all([detection(40), detection(80)])
        assert dominant_voice(notes) == Voice.SOPRANO
        assert dominant_voice([]) == Voice.SOPRANO

    def test_pitch_from_staff_position(self):
        assert pitch_from_staff_position(0) == 83
        assert pitch_from_staff_position(6, clef="bass") == 59
        assert pitch_from_staff_position(42) == 60
        assert pitch_from_staff_position(42, clef="bass") == 48
        with pytest.raises(ValueError, match="Unknown clef"):
            pitch_from_staff_position(0, clef="alto")
