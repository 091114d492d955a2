"""
Operational helpers: logging setup and configuration loading.
"""
