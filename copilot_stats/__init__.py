"""
Copilot Stats

Loads per-user, per-day AI coding assistant usage exports and derives
adoption, acceptance and engagement metrics for an organization.
"""

__version__ = "1.0.0"
