"""HTTP backend for a face-and-name quiz app: storage, quizzes and routes."""

__version__ = "0.1.0"
__all__ = ["__version__"]