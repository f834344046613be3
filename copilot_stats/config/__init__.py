"""
Configuration for Copilot Stats.
"""
