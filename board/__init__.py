# board/__init__.py
"""Task board synchronization: records, grouping, state and the mutation controller."""
