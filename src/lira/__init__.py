"""
Lira Checker - exchange-rate status and currency conversion service.
"""

__version__ = "1.0.0"
