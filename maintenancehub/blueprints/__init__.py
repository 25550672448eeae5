"""
MaintenanceHub
Blueprint registry.
"""
