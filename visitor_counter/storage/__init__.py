"""Backends for visit state.

``memory`` keeps everything in-process; ``database`` persists through SQLAlchemy.
"""
