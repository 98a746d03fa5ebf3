"""
Systems - persistence backends.
"""
