"""
JourneyForge phases - extraction, workflow and review.
"""
