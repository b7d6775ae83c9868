"""
Domain layer - Core business entities and domain logic.

This layer contains guides, points of interest, coordinates and the
validation rules that govern them, independent of any storage concerns.
"""
