"""Mureka song synthesis integration."""

from songpad.services.synthesis.mureka_client import MurekaClient
from songpad.services.synthesis.schemas import MurekaChoice, MurekaTask

__all__ = ["MurekaClient", "MurekaChoice", "MurekaTask"]
