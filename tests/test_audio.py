"""Sound synthesis helpers and the silent fallback."""

from stackblock.audio.engine import (
    GAME_OVER_NOTES,
    SAMPLE_RATE,
    AudioEngine,
    Note,
    combo_notes,
    render_notes,
)


def test_render_notes_length_and_range():
    samples = render_notes([Note(0.0, 440, 0.1, "sine", 0.3), Note(0.05, 660, 0.1, "square", 0.3)])
    assert len(samples) == int(SAMPLE_RATE * 0.15 + 1)
    assert max(samples) <= 32767
    assert min(samples) >= -32767


def test_notes_decay():
    samples = render_notes([Note(0.0, 220, 0.2, "sawtooth", 0.5)])
    head = max(abs(s) for s in samples[:500])
    tail = max(abs(s) for s in samples[-500:])
    assert tail < head / 10


def test_combo_pitch_rises():
    low = combo_notes(1)
    high = combo_notes(6)
    assert high[0].freq > low[0].freq
    assert low[1].freq == low[0].freq * 1.25


def test_game_over_descends():
    freqs = [note.freq for note in GAME_OVER_NOTES]
    assert freqs == sorted(freqs, reverse=True)


def test_uninitialized_engine_is_silent():
    engine = AudioEngine()
    assert not engine.enabled
    assert engine.play("place") is None
    engine.place()
    engine.perfect()
    engine.combo(3)
    engine.game_over()
    engine.cleanup()


def test_volume_and_mute():
    engine = AudioEngine()
    engine.set_volume(2.0)
    assert engine._volume == 1.0
    assert engine.toggle_mute() is True
    assert engine.toggle_mute() is False
