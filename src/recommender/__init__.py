"""Recommendation engine.

Turns a user's recent interaction events into a ranked list of product ids:
events inside the lookback window are weighted by kind, summed per product,
and ranked by score with ties broken by product id.
"""
