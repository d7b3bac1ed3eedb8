"""Integrity signal store tests: clamping, persistence, ordering, storage failures."""

from __future__ import annotations

import math
import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from leakguard.models import IntegritySignal
from leakguard.services.integrity import (
    IntegritySignalType,
    IntegrityStorageError,
    clamp_confidence,
    list_event_signals,
    record_integrity_signal,
)
from tests.factories import make_direct_event


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (0.42, 0.42),
        (-0.5, 0.0),
        (1.7, 1.0),
        (None, 0.0),
        ("abc", 0.0),
        (math.nan, 0.0),
        ("0.6", 0.6),
        (1, 1.0),
    ],
)
def test_clamp_confidence(raw, expected) -> None:
    assert clamp_confidence(raw) == pytest.approx(expected)


def test_record_signal_persists_clamped_row(db) -> None:
    event = make_direct_event(db)
    actor = uuid.uuid4()

    signal = record_integrity_signal(
        db,
        event_id=event.id,
        actor_user_id=actor,
        signal_type=IntegritySignalType.PROXIMITY_CLONE,
        confidence=1.7,
        weight=36,
    )

    stored = db.get(IntegritySignal, signal.id)
    assert stored.confidence == 1.0
    assert stored.weight == 36
    assert stored.signal_type == "PROXIMITY_CLONE"
    assert stored.actor_user_id == actor
    assert stored.details == {}
    assert stored.created_at is not None


def test_record_signal_accepts_string_type_and_keeps_details(db) -> None:
    event = make_direct_event(db)
    convo_id = uuid.uuid4()

    signal = record_integrity_signal(
        db,
        event_id=event.id,
        actor_user_id=uuid.uuid4(),
        signal_type="THREAD_NO_CONVERT",
        confidence="garbage",
        weight=24,
        related_conversation_id=convo_id,
        details={"message_count": 3},
    )

    stored = db.get(IntegritySignal, signal.id)
    assert stored.confidence == 0.0
    assert stored.related_conversation_id == convo_id
    assert stored.details == {"message_count": 3}


def test_record_signal_rejects_unknown_type(db) -> None:
    event = make_direct_event(db)
    with pytest.raises(ValueError):
        record_integrity_signal(
            db,
            event_id=event.id,
            actor_user_id=uuid.uuid4(),
            signal_type="NOT_A_SIGNAL",
            confidence=0.5,
            weight=10,
        )
    assert db.query(IntegritySignal).count() == 0


def test_record_signal_rejects_negative_weight(db) -> None:
    event = make_direct_event(db)
    with pytest.raises(ValueError, match="non-negative"):
        record_integrity_signal(
            db,
            event_id=event.id,
            actor_user_id=uuid.uuid4(),
            signal_type=IntegritySignalType.PASS_ON_ACTIVITY,
            confidence=0.5,
            weight=-1,
        )


def test_record_signal_wraps_storage_failure() -> None:
    """A rejected insert rolls back and surfaces as IntegrityStorageError."""
    mock_db = MagicMock()
    mock_db.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))

    with pytest.raises(IntegrityStorageError) as excinfo:
        record_integrity_signal(
            mock_db,
            event_id=uuid.uuid4(),
            actor_user_id=uuid.uuid4(),
            signal_type=IntegritySignalType.THREAD_NO_CONVERT,
            confidence=0.5,
            weight=24,
        )

    assert str(excinfo.value).startswith("Failed to log integrity signal:")
    assert isinstance(excinfo.value.__cause__, OperationalError)
    mock_db.rollback.assert_called_once()


def test_list_event_signals_newest_first(db) -> None:
    event = make_direct_event(db)
    other = make_direct_event(db)
    actor = uuid.uuid4()
    now = datetime.now(UTC)
    for offset, kind in ((3, "THREAD_NO_CONVERT"), (1, "PROXIMITY_CLONE"), (2, "PASS_ON_ACTIVITY")):
        db.add(
            IntegritySignal(
                event_id=event.id,
                actor_user_id=actor,
                signal_type=kind,
                confidence=0.5,
                weight=10,
                details={},
                created_at=now - timedelta(minutes=offset),
            )
        )
    db.add(
        IntegritySignal(
            event_id=other.id,
            actor_user_id=actor,
            signal_type="THREAD_NO_CONVERT",
            confidence=0.5,
            weight=10,
            details={},
        )
    )
    db.commit()

    signals = list_event_signals(db, event.id)

    assert [s.signal_type for s in signals] == [
        "PROXIMITY_CLONE",
        "PASS_ON_ACTIVITY",
        "THREAD_NO_CONVERT",
    ]


def test_list_event_signals_wraps_read_failure() -> None:
    mock_db = MagicMock()
    mock_db.query.side_effect = OperationalError("SELECT", {}, Exception("timeout"))

    with pytest.raises(IntegrityStorageError, match="^Failed to read integrity signals:"):
        list_event_signals(mock_db, uuid.uuid4())
    mock_db.rollback.assert_called_once()
