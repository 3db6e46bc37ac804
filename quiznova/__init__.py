# quiznova/__init__.py
"""
QuizNova

A FastAPI service that asks a chat-completion model for multiple-choice
questions, normalizes the reply into a strict quiz schema, and serves a
browser client that plays the quiz with a per-question countdown.
"""

__version__ = "1.0.0"
