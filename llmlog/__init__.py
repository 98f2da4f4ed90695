"""llmlog: a personal archive for saved AI-conversation transcripts."""

__version__ = "0.1.0"
