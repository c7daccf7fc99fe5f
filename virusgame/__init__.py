"""
Virus! - Multiplayer card game engine and room server

A deterministic rules engine for the organ/virus/medicine card game.
The package provides:
- A pure reducer: (state, action) -> state
- Card catalog, deck builder and discard recycling
- An in-memory room store that serializes each room's actions
- A FastAPI app broadcasting full state snapshots
"""

__version__ = "0.1.0"
