"""
Persistence backends for Crime Map.
"""
