"""
FileShare

Upload a file, get a short link; the file is served until it expires or,
optionally, until it has been downloaded once.
"""

__version__ = "1.0.0"
