"""Daggerheart rules engine.

Derived stats and character advancement for the Daggerheart tabletop
role-playing game: dice notation, equipment modifiers, armor and damage
thresholds, level-up validation, the level-up session and de-leveling.
"""

__version__ = "0.1.0"
__author__ = "Daggerheart Engine Contributors"
