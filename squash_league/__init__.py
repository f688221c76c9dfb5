"""
Squash league simulation: two divisions of five, an end-of-season cup,
player careers, retirements and promotion/relegation.
"""

__version__ = "0.1.0"
