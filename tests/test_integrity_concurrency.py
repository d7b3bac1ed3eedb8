"""Concurrent recompute regression.

Two recomputes for the same event with a signal recorded in between must not
let the one that read the shorter signal log commit last.
"""

from __future__ import annotations

import threading
import uuid

from leakguard.services.integrity import (
    IntegritySignalType,
    get_integrity_score,
    record_integrity_signal,
    recompute_integrity_score,
)
from leakguard.services.integrity import score_aggregator
from tests.factories import make_direct_event


def test_interleaved_recomputes_keep_every_signal(session_factory, monkeypatch) -> None:
    company = uuid.uuid4()
    actor = uuid.uuid4()

    setup = session_factory()
    event_id = make_direct_event(setup).id
    record_integrity_signal(
        setup,
        event_id=event_id,
        actor_user_id=actor,
        signal_type=IntegritySignalType.THREAD_NO_CONVERT,
        confidence=1.0,
        weight=24,
    )
    setup.close()

    original_list = score_aggregator.list_event_signals
    first_read_done = threading.Event()
    release_first = threading.Event()
    calls = {"n": 0}
    calls_lock = threading.Lock()

    def paused_list(db, ev_id):
        rows = original_list(db, ev_id)
        with calls_lock:
            calls["n"] += 1
            is_first = calls["n"] == 1
        if is_first:
            first_read_done.set()
            release_first.wait(timeout=10)
        return rows

    monkeypatch.setattr(score_aggregator, "list_event_signals", paused_list)

    errors: list[Exception] = []

    def run_recompute() -> None:
        session = session_factory()
        try:
            recompute_integrity_score(
                session, event_id=event_id, company_id=company, actor_user_id=actor
            )
        except Exception as exc:
            errors.append(exc)
        finally:
            session.close()

    first = threading.Thread(target=run_recompute)
    first.start()
    assert first_read_done.wait(timeout=10)

    # First recompute now holds a one-signal view; add a second signal.
    writer = session_factory()
    record_integrity_signal(
        writer,
        event_id=event_id,
        actor_user_id=actor,
        signal_type=IntegritySignalType.MARKETPLACE_TO_DIRECT_SWITCH,
        confidence=1.0,
        weight=28,
    )
    writer.close()

    second = threading.Thread(target=run_recompute)
    second.start()
    second.join(timeout=0.5)
    assert second.is_alive(), "second recompute must wait for the first"

    release_first.set()
    first.join(timeout=10)
    second.join(timeout=10)
    assert not first.is_alive() and not second.is_alive()
    assert errors == []

    reader = session_factory()
    try:
        row = get_integrity_score(reader, event_id)
        assert row.score == 52
        assert row.contributing_signal_count == 2
        assert row.risk_band == "medium"
    finally:
        reader.close()
