"""Fetch the PDB of a native module from the Unity symbol server."""

__version__ = '1.0.0'
