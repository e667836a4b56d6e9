"""Core domain logic for laterread."""
