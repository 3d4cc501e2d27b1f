"""
Credentials, bearer tokens and ownership checks.
"""
