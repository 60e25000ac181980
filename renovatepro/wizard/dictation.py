"""Voice dictation capture for the "Your Vision" field.

Speech recognition itself runs on the client device; this module only
receives recognized transcript fragments. A capture appends each fragment to
the existing text (space separated, never replacing it), stops on its own
after one recognized utterance, and can be cancelled at any time.
"""
from typing import AsyncIterator, Callable
from loguru import logger


class DictationCapture:
    def __init__(self, sink: Callable[[str], None]):
        self._sink = sink
        self.listening = False

    def start(self):
        self.listening = True
        logger.debug("Dictation started")

    def cancel(self):
        if self.listening:
            logger.debug("Dictation cancelled")
        self.listening = False

    def feed(self, fragment: str) -> bool:
        """Deliver one recognized utterance. Returns True if it was applied."""
        if not self.listening:
            logger.debug("Dropping dictation fragment received while not listening")
            return False

        text = fragment.strip()
        if not text:
            return False

        self._sink(text)
        # Single-utterance capture: stop after the first recognized result
        self.listening = False
        return True

    async def consume(self, source: AsyncIterator[str]) -> bool:
        """Listen on a transcript source until one utterance lands or capture stops."""
        self.start()
        try:
            async for fragment in source:
                if not self.listening:
                    break
                if self.feed(fragment):
                    return True
            return False
        finally:
            self.listening = False


def append_transcript(existing: str, fragment: str) -> str:
    """Append a transcript fragment to existing text, space-separated."""
    return f"{existing} {fragment}" if existing else fragment
