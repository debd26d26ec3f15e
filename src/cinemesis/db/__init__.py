"""Database session and engine helpers."""
