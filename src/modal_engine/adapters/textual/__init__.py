"""Textual host adapter.

``controller`` has no Textual dependency; ``app`` needs the ``textual`` extra.
"""

from .controller import TextualUIHooks, TextualVimAdapter

__all__ = ["TextualUIHooks", "TextualVimAdapter"]
