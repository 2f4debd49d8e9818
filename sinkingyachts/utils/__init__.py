"""Shared helpers for sinkingyachts."""
