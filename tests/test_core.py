"""Tests for core types and errors."""

import numpy as np
import pytest

from score_scanner.core import (
    CollaboratorFailure,
    ContractViolation,
    EncodingError,
    ErrorCategory,
    Event,
    EventKind,
    RawDetection,
    Sequence,
    Voice,
    beats_to_ms,
    ms_to_beats,
    pitch_name,
)


class TestRawDetection:
    def test_creation(self):
        d = RawDetection(pitch=60, confidence=0.8, duration=0.5, position_hint=3, timestamp=1.0)
        assert d.pitch == 60
        assert d.confidence == 0.8
        assert d.duration == 0.5
        assert d.position_hint == 3
        assert d.timestamp == 1.0
        assert d.pitch_name == "C4"

    def test_out_of_range_pitch_allowed(self):
        assert RawDetection(pitch=140, confidence=0.5).pitch == 140

    def test_numpy_values_normalized(self):
        d = RawDetection(pitch=np.int64(64), confidence=np.float32(0.75))
        assert type(d.pitch) is int
        assert type(d.confidence) is float

    @pytest.mark.parametrize(
        "kwargs,field_name",
        [
            ({"pitch": 60.5, "confidence": 0.5}, "pitch"),
            ({"pitch": True, "confidence": 0.5}, "pitch"),
            ({"pitch": 60, "confidence": 1.5}, "confidence"),
            ({"pitch": 60, "confidence": float("nan")}, "confidence"),
            ({"pitch": 60, "confidence": 0.5, "duration": float("inf")}, "duration"),
            ({"pitch": 60, "confidence": 0.5, "position_hint": 2.5}, "position_hint"),
            ({"pitch": 60, "confidence": 0.5, "timestamp": "soon"}, "timestamp"),
        ],
    )
    def test_invalid_fields(self, kwargs, field_name):
        with pytest.raises(ContractViolation) as exc_info:
            RawDetection(**kwargs)
        assert exc_info.value.details["field"] == field_name


class TestEventAndSequence:
    def test_event_beat_defaults_to_time(self):
        e = Event(kind=EventKind.NOTE_ON, pitch=60, velocity=100, time=1.5, channel=0)
        assert e.beat == 1.5
        assert e.is_note_on

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"channel": 16},
            {"time": -0.5},
            {"time": float("nan")},
            {"kind": "note_on"},
        ],
    )
    def test_invalid_event(self, kwargs):
        fields = dict(kind=EventKind.NOTE_ON, pitch=60, velocity=100, time=0.0, channel=0)
        fields.update(kwargs)
        with pytest.raises(ContractViolation):
            Event(**fields)

    def test_sequence_requires_positive_tempo(self):
        with pytest.raises(ContractViolation):
            Sequence(tempo_bpm=0)

    def test_sequence_counts(self):
        events = (
            Event(kind=EventKind.NOTE_ON, pitch=60, velocity=100, time=0.0, channel=1),
            Event(kind=EventKind.NOTE_OFF, pitch=60, velocity=0, time=2.0, channel=1),
        )
        seq = Sequence(tempo_bpm=90, events=events)
        assert len(seq) == 2
        assert seq.note_count == 1
        assert seq.total_duration == 2.0
        assert seq.reference_bpm == 90

    def test_voice_views_are_read_only(self):
        events = (Event(kind=EventKind.NOTE_ON, pitch=72, velocity=100, time=0.0, channel=0),)
        seq = Sequence(tempo_bpm=120, events=events)
        with pytest.raises(TypeError):
            seq.voices[Voice.SOPRANO] = ()
        assert len(seq.voices[Voice.SOPRANO]) == 1


class TestUnits:
    def test_default_duration_in_beats(self):
        # 100 ms at 120 BPM (500 ms per beat)
        assert ms_to_beats(100, 120) == pytest.approx(0.2)
        assert ms_to_beats(500, 120) == pytest.approx(1.0)
        assert ms_to_beats(100, 60) == pytest.approx(0.1)

    def test_roundtrip(self):
        assert beats_to_ms(ms_to_beats(250, 97), 97) == pytest.approx(250)

    def test_tempo_must_be_positive(self):
        with pytest.raises(ContractViolation):
            ms_to_beats(100, 0)

    def test_pitch_name(self):
        assert pitch_name(60) == "C4"
        assert pitch_name(69) == "A4"
        assert pitch_name(61) == "C#4"
        assert pitch_name(36) == "C2"


class TestErrors:
    def test_contract_violation_is_value_error(self):
        err = ContractViolation(message="bad", field_name="pitch", value=200)
        assert isinstance(err, ValueError)
        assert str(err) == "[contract] bad"
        assert err.to_dict() == {
            "category": "contract",
            "message": "bad",
            "details": {"field": "pitch", "value": "200"},
        }

    def test_encoding_error_category(self):
        err = EncodingError(message="late", event_index=4)
        assert isinstance(err, ContractViolation)
        assert err.category == ErrorCategory.ENCODING
        assert err.details == {"event_index": 4}

    def test_collaborator_failure(self):
        err = CollaboratorFailure(message="model crashed", batch_index=2)
        assert err.to_dict()["details"] == {"batch_index": 2}
