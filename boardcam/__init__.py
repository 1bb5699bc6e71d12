"""Chessboard recognition from camera frames, move notation, and a model of the camera capture path."""

__version__ = "0.1.0"