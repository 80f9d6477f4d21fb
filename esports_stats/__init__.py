"""
Esports stats core.

Derived champion and player statistics and season navigation for an esports
dataset, read from a relational store and cached with tournament-aware TTLs.
"""
