"""
User accounts: listing, signup and login.
"""
