"""Game domain services: phrase handling, the round/turn engine, scoring
and the auto-advance timer.

Pure(ish) domain logic imported by socket handlers and HTTP routes, keeping
transport concerns out of the game mechanics.
"""
