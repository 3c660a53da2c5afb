"""
RentMatch - Renter Identity Matching Engine

Normalizes renter identifiers, compares identities and scores how
likely a queried renter is the same person as a stored profile.
"""

__version__ = "0.1.0"
