"""
Command-line tools for offline wallet scoring.
"""
