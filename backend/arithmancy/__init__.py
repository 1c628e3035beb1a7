"""
Arithmancy - a turn-based math-puzzle RPG backend.

Characters fight monsters by solving math problems, progress through
ordered quest objectives and manage an inventory of consumables and
equipment.
"""

__version__ = "0.1.0"
