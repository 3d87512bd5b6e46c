"""
Version information for grammarevo.
"""

# Version of the grammarevo package
__version__ = "0.1.0"
