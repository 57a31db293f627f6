"""
clinicscheduler - appointment scheduling and duplication engine for a clinic front desk.
"""

__version__ = "0.1.0"
