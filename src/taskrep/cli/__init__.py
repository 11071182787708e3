"""Command-line interface for TaskRep."""
