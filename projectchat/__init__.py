"""Project chat platform backend."""
