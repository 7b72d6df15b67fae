import logging
import threading
import time

import pyttsx3

logger = logging.getLogger(__name__)

TTS_COOLDOWN = 0.7


class Announcer:
    """Speaks short callouts on a background thread, at most once per cooldown."""

    def __init__(self, cooldown=TTS_COOLDOWN, enabled=True, clock=time.time):
        self.cooldown = cooldown
        self.enabled = enabled
        self._clock = clock
        self._engine = None
        self._engine_lock = threading.Lock()
        self._last_tts = 0.0

    def _get_engine(self):
        if self._engine is None:
            self._engine = pyttsx3.init()
        return self._engine

    def speak(self, text):
        try:
            with self._engine_lock:
                engine = self._get_engine()
                engine.say(text)
                engine.runAndWait()
        except Exception as e:
            logger.warning("Text-to-speech failed: %s", e)

    def speak_async(self, text):
        threading.Thread(target=lambda: self.speak(text), daemon=True).start()

    def say(self, msg):
        """Queue ``msg`` unless disabled or still inside the cooldown. Returns True if queued."""
        if not self.enabled:
            return False
        now = self._clock()
        if now - self._last_tts > self.cooldown:
            self._last_tts = now
            self.speak_async(msg)
            return True
        return False

    def announce_rep(self, count):
        return self.say(f"Rep {count}")
