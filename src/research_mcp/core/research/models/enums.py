"""Shared enums for research models."""

from enum import Enum


class ResearchDepth(str, Enum):
    """Coarse effort knob controlling sub-question count, page budget and gap rounds."""

    QUICK = "quick"
    STANDARD = "standard"
    DEEP = "deep"
