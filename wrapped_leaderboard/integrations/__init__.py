"""
Clients for the external services the leaderboard depends on.
"""
