"""SpeakBuddies: pair anonymous callers into short topic-driven voice channels."""

__version__ = "0.1.0"
