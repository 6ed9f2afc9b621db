"""Depthsperite: paired colour and depth stills from a structured-light sensor."""

__version__ = "1.0.0"
