"""mixguard - command safety and quality gates for mix projects."""

__version__ = "0.1.0"
