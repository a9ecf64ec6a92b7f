"""
Adapters: command line and configuration
"""
