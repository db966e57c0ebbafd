"""In-process HTTP tests for the voter, poll and votes services.

Each service runs as an ASGI app behind httpx.ASGITransport; the votes
service talks to the voter and poll apps the same way.
"""
