"""
studiopost - same-day studio availability posts from a booking calendar.
"""

__version__ = "0.1.0"
