"""Abstract interfaces for external collaborators."""
