"""
Effect Reconciliation Engine

Keeps an immutable application state synchronized with the asynchronous effects
that state implies, so that rehydrating a state resumes exactly the right work.
"""

__version__ = "0.1.0"
