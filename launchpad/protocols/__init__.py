"""
Protocol integrations
"""
