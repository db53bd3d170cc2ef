"""Concrete implementations of the interfaces package."""
