"""Social-feed frames and webhook logging."""

from whispermarket.frames.service import FrameAction, FrameService

__all__ = ["FrameAction", "FrameService"]
