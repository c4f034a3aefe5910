"""
Central version constant for Ottomaton.
"""

__version__ = "1.0.0"
