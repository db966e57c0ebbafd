"""Unit tests for stores, counters, the vote workflow and the todo database."""
