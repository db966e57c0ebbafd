"""File-backed todo list with a command line interface."""
