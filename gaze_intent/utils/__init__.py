"""
Shared utilities: statistics, configuration and logging
"""
