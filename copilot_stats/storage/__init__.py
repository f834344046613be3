"""
Storage layer for Copilot Stats.

Holds the record model, the NDJSON line parser and the in-memory
dataset that every query reads from.
"""
