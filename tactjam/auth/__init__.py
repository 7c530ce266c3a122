"""
Authentication capability: password hashing and session tokens.
"""
