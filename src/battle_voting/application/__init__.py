"""Application layer - use cases orchestrating the voting domain."""
