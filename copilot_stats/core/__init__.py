"""
Core modules for Copilot Stats.

This package contains filtering, aggregation, statistics and the
composite metrics engine.
"""
