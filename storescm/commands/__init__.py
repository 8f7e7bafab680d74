"""Command-line commands for storescm."""
