"""
stackblock audio engine - synthesized chiptune blips.

Every effect is a short sequence of enveloped oscillator notes rendered
once into a pygame Sound. When the mixer cannot start (no device, CI)
the engine stays silent instead of failing.
"""

import pygame
import array
import math
import logging
from typing import Callable, Dict, List, NamedTuple, Optional

from stackblock.game.ports import Sound

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100


def square(t: float, freq: float) -> float:
    """Square wave oscillator."""
    return 1 if (t * freq) % 1 < 0.5 else -1


def sine(t: float, freq: float) -> float:
    """Sine wave oscillator."""
    return math.sin(2 * math.pi * freq * t)


def saw(t: float, freq: float) -> float:
    """Sawtooth wave."""
    return 2 * ((t * freq) % 1) - 1


WAVES: Dict[str, Callable[[float, float], float]] = {
    "square": square,
    "sine": sine,
    "sawtooth": saw,
}


class Note(NamedTuple):
    start: float     # seconds
    freq: float      # Hz
    duration: float  # seconds
    wave: str = "sine"
    volume: float = 0.3


def render_notes(notes: List[Note]) -> array.array:
    """Mix notes into 16-bit mono samples.

    Each note decays exponentially from its volume to 0.001 over its
    duration.
    """
    length = max(n.start + n.duration for n in notes)
    mix = [0.0] * int(SAMPLE_RATE * length + 1)
    for note in notes:
        osc = WAVES[note.wave]
        offset = int(note.start * SAMPLE_RATE)
        count = int(note.duration * SAMPLE_RATE)
        decay = math.log(0.001 / note.volume) / note.duration
        for i in range(count):
            t = i / SAMPLE_RATE
            mix[offset + i] += osc(t, note.freq) * note.volume * math.exp(decay * t)

    samples = array.array('h')
    for value in mix:
        samples.append(int(max(-1.0, min(1.0, value)) * 32767))
    return samples


PLACE_NOTES = [Note(0.0, 220, 0.12, "square", 0.1), Note(0.0, 440, 0.08, "sine", 0.1)]
PERFECT_NOTES = [
    Note(0.0, 523, 0.12, "sine", 0.2),
    Note(0.07, 659, 0.12, "sine", 0.2),
    Note(0.14, 784, 0.18, "sine", 0.18),
]
GAME_OVER_NOTES = [
    Note(0.0, 400, 0.18, "sawtooth", 0.18),
    Note(0.14, 300, 0.18, "sawtooth", 0.16),
    Note(0.28, 200, 0.35, "sawtooth", 0.12),
]


def combo_notes(n: int) -> List[Note]:
    """Two rising blips, pitched up with the combo count."""
    f = 523 + n * 40
    return [Note(0.0, f, 0.1, "sine", 0.15), Note(0.06, f * 1.25, 0.1, "sine", 0.12)]


class AudioEngine(Sound):
    """Plays the game's sound effects through pygame.mixer."""

    MAX_COMBO_PITCH = 12

    def __init__(self, volume: float = 0.6) -> None:
        self._initialized = False
        self._sounds: Dict[str, pygame.mixer.Sound] = {}
        self._volume = volume
        self._muted = False

    @property
    def enabled(self) -> bool:
        return self._initialized and not self._muted

    def init(self) -> bool:
        """Initialize the audio system. Returns False when unavailable."""
        try:
            pygame.mixer.pre_init(SAMPLE_RATE, -16, 2, 512)
            pygame.mixer.init()
            self._initialized = True
            self._generate_all_sounds()
            logger.info("Audio engine initialized")
            return True
        except pygame.error as e:
            logger.warning(f"Audio unavailable, running silent: {e}")
            self._initialized = False
            return False

    def _create_sound(self, samples: array.array) -> pygame.mixer.Sound:
        """Create a pygame Sound from mono samples (auto-converted to stereo)."""
        stereo = array.array('h')
        for s in samples:
            stereo.append(s)
            stereo.append(s)
        return pygame.mixer.Sound(buffer=stereo)

    def _generate_all_sounds(self) -> None:
        self._sounds["place"] = self._create_sound(render_notes(PLACE_NOTES))
        self._sounds["perfect"] = self._create_sound(render_notes(PERFECT_NOTES))
        self._sounds["game_over"] = self._create_sound(render_notes(GAME_OVER_NOTES))
        logger.info(f"Generated {len(self._sounds)} sounds")

    def play(self, sound_name: str) -> Optional[pygame.mixer.Channel]:
        """Play a generated sound by name."""
        if not self.enabled:
            return None

        sound = self._sounds.get(sound_name)
        if not sound:
            logger.warning(f"Sound not found: {sound_name}")
            return None

        sound.set_volume(self._volume)
        return sound.play()

    # Sound port

    def place(self) -> None:
        self.play("place")

    def perfect(self) -> None:
        self.play("perfect")

    def combo(self, n: int) -> None:
        if not self.enabled:
            return
        n = max(0, min(n, self.MAX_COMBO_PITCH))
        name = f"combo_{n}"
        if name not in self._sounds:
            self._sounds[name] = self._create_sound(render_notes(combo_notes(n)))
        self.play(name)

    def game_over(self) -> None:
        self.play("game_over")

    # Controls

    def set_volume(self, volume: float) -> None:
        self._volume = max(0.0, min(1.0, volume))

    def toggle_mute(self) -> bool:
        """Toggle mute state. Returns True when now muted."""
        self._muted = not self._muted
        logger.info("Audio muted" if self._muted else "Audio unmuted")
        return self._muted

    def cleanup(self) -> None:
        """Cleanup audio resources."""
        if self._initialized:
            pygame.mixer.quit()
            self._initialized = False
            logger.info("Audio engine cleaned up")


# Global audio engine instance
_audio_engine: Optional[AudioEngine] = None


def get_audio_engine() -> AudioEngine:
    """Get the global audio engine instance."""
    global _audio_engine
    if _audio_engine is None:
        _audio_engine = AudioEngine()
    return _audio_engine
