"""
UI logic package - portable across front ends.

Batch selection management for list views. No UI framework dependencies.
"""
from .batch_selection import Identifiable, SelectionEvent, SelectionManager

__all__ = [
    'Identifiable',
    'SelectionEvent',
    'SelectionManager'
]
