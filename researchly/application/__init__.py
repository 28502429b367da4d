"""Application layer: prompts and services behind the realtime operations."""
