"""
Region discovery and sub-tile decomposition.
"""
