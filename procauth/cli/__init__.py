"""
Command line interface for procauth.
"""
