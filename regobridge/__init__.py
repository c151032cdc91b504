"""
Version-adaptive bridge to the OPA command-line tool.
"""

__version__ = "0.1.0"
