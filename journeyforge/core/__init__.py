"""
Core - enums, domain models, events and exceptions.
"""
