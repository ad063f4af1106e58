"""High score storage and the sound event adapter."""

import json

from stackblock.core.events import Event, EventType
from stackblock.game.ports import (
    JsonHighScoreStore,
    MemoryHighScoreStore,
    NullSound,
    Sound,
    SoundEventAdapter,
)


class RecordingSound(Sound):
    def __init__(self):
        self.calls = []

    def place(self):
        self.calls.append("place")

    def perfect(self):
        self.calls.append("perfect")

    def combo(self, n):
        self.calls.append(f"combo:{n}")

    def game_over(self):
        self.calls.append("game_over")


class TestJsonHighScoreStore:

    def test_missing_file_is_zero(self, tmp_path):
        assert JsonHighScoreStore(tmp_path / "none.json").load_high_score() == 0

    def test_round_trip_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "best.json"
        JsonHighScoreStore(path).save_high_score(42)
        assert json.loads(path.read_text()) == {"high_score": 42}
        assert JsonHighScoreStore(path).load_high_score() == 42

    def test_corrupt_file_is_zero(self, tmp_path):
        path = tmp_path / "best.json"
        path.write_text("{not json")
        assert JsonHighScoreStore(path).load_high_score() == 0

    def test_wrong_shape_is_zero(self, tmp_path):
        path = tmp_path / "best.json"
        path.write_text("[1, 2, 3]")
        assert JsonHighScoreStore(path).load_high_score() == 0

    def test_unwritable_path_is_logged(self, tmp_path, caplog):
        blocker = tmp_path / "file"
        blocker.write_text("")
        JsonHighScoreStore(blocker / "best.json").save_high_score(3)
        assert "Failed to save high score" in caplog.text


def test_memory_store():
    store = MemoryHighScoreStore(initial=7)
    assert store.load_high_score() == 7
    store.save_high_score(9)
    assert store.load_high_score() == 9


def test_null_sound_is_silent():
    sound = NullSound()
    sound.place()
    sound.perfect()
    sound.combo(3)
    sound.game_over()


class TestSoundEventAdapter:

    def test_maps_gameplay_events(self, bus):
        sound = RecordingSound()
        SoundEventAdapter(bus, sound)
        bus.emit(Event(EventType.BLOCK_PLACED))
        bus.emit(Event(EventType.BLOCK_PERFECT))
        bus.emit(Event(EventType.COMBO, data={"count": 4}))
        bus.emit(Event(EventType.GROWTH))
        bus.emit(Event(EventType.GAME_OVER))
        assert sound.calls == ["place", "perfect", "combo:4", "combo:5", "game_over"]

    def test_detach(self, bus):
        sound = RecordingSound()
        adapter = SoundEventAdapter(bus, sound)
        adapter.detach()
        bus.emit(Event(EventType.BLOCK_PLACED))
        assert sound.calls == []

    def test_plays_along_with_simulation(self, bus, sim):
        sound = RecordingSound()
        SoundEventAdapter(bus, sound)
        top = sim.session.top_block
        sim.commit(position=top.x)
        sim.commit(position=top.x)
        sim.commit(position=top.x + 30)
        sim.commit(position=top.x + 1000)
        assert sound.calls == ["perfect", "perfect", "combo:2", "place", "game_over"]
