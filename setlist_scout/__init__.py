"""SetlistScout: predict an artist's setlist from their recent tour history."""

__version__ = "0.1.0"
