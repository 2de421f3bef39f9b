"""Command-line tools: demo scenario and maintenance jobs."""
