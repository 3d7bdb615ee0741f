"""
commscope - partner analysis for mobile-extraction spreadsheet exports.

Loads call logs, conversations and contact lists exported by a forensic
extraction tool, filters noise rows, recovers communication partners from
free-text party fields and ranks them by activity.
"""

__version__ = "1.0.0"
