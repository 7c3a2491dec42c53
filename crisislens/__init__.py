"""
CrisisLens - crisis report aggregation, enrichment and situational insights.
"""
__version__ = "0.1.0"
