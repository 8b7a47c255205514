"""Session storage adapters.

Sessions live in process memory for now; the abstract interface keeps the
auth layer independent of where they are stored.
"""
