"""
Core package - board state, rendering logic and engine adapters.

No UI framework dependencies.
"""
