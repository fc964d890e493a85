"""Shared domain primitives used across bounded contexts."""
