"""Repository interfaces and implementations.

This package defines abstract repository interfaces for league documents and
admin sessions, and concrete implementations such as the SQLite adapters
under :mod:`repositories.sqlite`.
"""
