"""
Weight Loss Tracker - Goal, weekly log and progress tracking.

Records body-measurement goals and weekly metrics, and derives progress
statistics and chart-ready series from them.
"""

__version__ = "0.1.0"
