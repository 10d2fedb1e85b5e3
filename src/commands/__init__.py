"""
Command pattern implementation for the goal tracker.

Each request is represented by a CommandContext and run through a pipeline
of handlers ending in the command's business logic, keeping HTTP concerns
out of the commands themselves.
"""
