"""SLIDEM: ion effective mass, density and along-track drift from Swarm faceplate and LP data."""

__version__ = "2.2.0"
