"""
Weight Log Sync - Single-user weight tracker backed by a CSV file on GitHub.

Reads, merges, and writes a versioned CSV file through the GitHub contents API
with optimistic-concurrency conflict detection and bounded retry.
"""

__version__ = "0.1.0"
