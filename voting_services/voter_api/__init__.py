"""Voter service: voters and their vote history."""
