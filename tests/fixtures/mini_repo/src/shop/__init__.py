"""Mini fixture package for CLI smoke tests."""
