"""Word drill: picture prompts, spoken answers, compassionate matching."""

__version__ = "0.1.0"
