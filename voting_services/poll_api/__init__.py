"""Poll service: polls and their options."""
