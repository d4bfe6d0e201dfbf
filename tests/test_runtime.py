from __future__ import annotations

from pathlib import Path
from typing import Any, List

import pytest

from undo_session.runtime import EventBus, telemetry


@pytest.fixture(autouse=True)
def isolated_telemetry(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(telemetry, "_ACTIVE_CONFIG", None)
    monkeypatch.setattr(telemetry, "_LOGGER_CACHE", {})
    monkeypatch.setenv("UNDO_SESSION_LOG_FILE", str(tmp_path / "undo_session.log"))


@pytest.mark.parametrize("preset", ["development", "quiet", "QUIET"])
def test_presets_install_a_fresh_config(preset: str) -> None:
    telemetry.configure(preset="development")
    first = telemetry.get_logger("presets")

    telemetry.configure(preset=preset)

    assert telemetry._ACTIVE_CONFIG is not None
    assert telemetry.get_logger("presets") is not first
    assert telemetry.get_logger("presets") is telemetry.get_logger("presets")


def test_unknown_preset_is_rejected() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="chatty")
    assert telemetry._ACTIVE_CONFIG is None


def test_config_and_preset_are_exclusive() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=object(), preset="quiet")


def test_event_bus_delivers_in_subscription_order() -> None:
    bus = EventBus()
    seen: List[Any] = []

    def first(payload: object) -> None:
        seen.append(("first", payload))

    def second(payload: object) -> None:
        seen.append(("second", payload))

    bus.subscribe("buffer.opened", first)
    bus.subscribe("buffer.opened", second)
    bus.emit("buffer.opened", "a.txt")

    assert seen == [("first", "a.txt"), ("second", "a.txt")]
    assert bus.subscribers("buffer.opened") == (first, second)
    assert bus.unsubscribe("buffer.opened", first) is True
    assert bus.unsubscribe("buffer.opened", first) is False
    assert bus.subscribers("buffer.opened") == (second,)
    bus.emit("buffer.closed")
    assert len(seen) == 2
