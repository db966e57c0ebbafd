"""Votes service: records votes after checking the voter and poll services."""
