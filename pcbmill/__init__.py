"""Gerber geometry rendering, outline bridges and G-code moves for PCB milling."""

__version__ = "0.1.0"