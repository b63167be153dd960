"""
Point-of-sale register core.
"""
