# cipherstats: performance analytics for an educational cipher toolkit
"""
cipherstats turns timed cipher executions into analytics:

- per-algorithm summary statistics (mean, median, spread, percentiles)
- time-bucketed averages and linear trend classification
- heuristic insights, moving-average predictions and pairwise comparisons
- composed reports written as JSON, text and CSV
"""

__version__ = "0.1.0"
