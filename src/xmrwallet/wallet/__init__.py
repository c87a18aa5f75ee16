"""
Sweep planning and wallet data models.
"""
