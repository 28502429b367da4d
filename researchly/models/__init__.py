"""Domain value objects and realtime wire schemas."""
