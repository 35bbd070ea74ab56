"""
.. include:: ../README.md
"""

__all__ = [
    "builder",
    "config",
    "database",
    "dynamic",
    "exceptions",
    "instant",
    "model",
    "resolver",
    "tzif",
    "tzinfo",
]
