"""Configuration constants and dataclasses for the creature arena."""
