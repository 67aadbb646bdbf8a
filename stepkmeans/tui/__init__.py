"""
Terminal front end for the clustering engine.
"""
