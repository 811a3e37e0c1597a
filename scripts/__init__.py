"""
Scripts Package.

Operational scripts for the chapter console leaderboard.

Scripts:
- run_dashboard: Serve the read-only leaderboard API
- run_leaderboard: Print a monthly leaderboard to the terminal
"""

# Scripts are meant to be run directly, not imported
