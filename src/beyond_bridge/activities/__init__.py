"""
Activity classification for translated entities.
"""

from .classifier import RULES, ClassifierInput, Rule, classify, classify_entity

__all__ = [
    "RULES",
    "ClassifierInput",
    "Rule",
    "classify",
    "classify_entity",
]
