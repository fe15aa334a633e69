"""Shared types, event bus and the per-frame pipeline."""
