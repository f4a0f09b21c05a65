"""Two-player card game server with rooms, spectators and card-set loading."""

__version__ = "0.1.0"