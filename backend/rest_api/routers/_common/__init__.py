"""
Helpers shared by every router: pagination and the response envelope.
"""
