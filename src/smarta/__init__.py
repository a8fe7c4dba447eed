"""
SMARTA Slack - MARTA train alerts for Slack.

Polls the MARTA real-time feed for boarding trains and relays them to a
Slack webhook, and answers "/find-arrival <station>" slash commands.
"""

__version__ = "1.0.0"
