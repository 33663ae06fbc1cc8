"""Tug-of-war simulation: match rules, wire records, and referee, player and display processes."""

__version__ = "0.1.0"