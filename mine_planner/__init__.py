"""Mining layout planner.

Turns a rectangular region of extraction points into a placeholder plan of
mining units, transport lines, power nodes, effect emitters and fluid
segments, and finds previously emitted placeholders for removal.
"""

__version__ = "0.3.0"
