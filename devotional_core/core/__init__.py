"""
Core utilities: exceptions and small shared helpers used across stores, remote client and services.
"""
