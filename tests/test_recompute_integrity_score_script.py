"""Tests for scripts/recompute_integrity_score.py."""

from __future__ import annotations

import importlib.util
import uuid
from pathlib import Path
from unittest.mock import patch

import pytest

from leakguard.services.integrity import IntegrityStorageError, record_integrity_signal
from tests.factories import make_direct_event

SCRIPT_PATH = Path(__file__).resolve().parent.parent / "scripts" / "recompute_integrity_score.py"


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location("recompute_integrity_score", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestRecomputeIntegrityScoreScript:
    """CLI wrapper around recompute_integrity_score."""

    def test_prints_score_and_exits_zero(self, script, session_factory, capsys) -> None:
        setup = session_factory()
        event_id = make_direct_event(setup).id
        record_integrity_signal(
            setup,
            event_id=event_id,
            actor_user_id=uuid.uuid4(),
            signal_type="EVENT_COLLISION_DUPLICATE",
            confidence=0.88,
            weight=40,
        )
        setup.close()

        with patch.object(script, "SessionLocal", session_factory):
            code = script.main([str(event_id)])

        assert code == 0
        out = capsys.readouterr().out
        assert f"event_id={event_id}" in out
        assert "score=35 band=medium signals=1" in out

    def test_storage_failure_exits_one(self, script, session_factory, capsys) -> None:
        with (
            patch.object(script, "SessionLocal", session_factory),
            patch.object(
                script,
                "recompute_integrity_score",
                side_effect=IntegrityStorageError("Failed to read integrity signals: boom"),
            ),
        ):
            code = script.main([str(uuid.uuid4())])

        assert code == 1
        assert "Failed to read integrity signals" in capsys.readouterr().err

    def test_rejects_non_uuid_event_id(self, script) -> None:
        with pytest.raises(SystemExit):
            script.main(["not-a-uuid"])
