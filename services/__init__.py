"""Service implementations for the leaderboard processing domain."""
