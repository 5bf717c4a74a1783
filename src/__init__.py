"""Pluggable pieces around the oracle core."""
