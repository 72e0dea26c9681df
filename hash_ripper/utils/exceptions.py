"""
Custom exceptions for the Hash Ripper.
"""

class HashRipperError(Exception):
    """Base exception for hash ripper errors"""
    pass


class SessionStateError(HashRipperError):
    """Session used out of order (not started, not configured, or busy)"""
    pass


class UnsupportedAlgorithmError(HashRipperError):
    """Algorithm identifier is unknown or not offered"""
    pass


class InvalidWordSourceError(HashRipperError):
    """Invalid word source configuration"""
    pass


class WordListNotFoundError(HashRipperError):
    """Word list file not found"""
    pass


class ConfigError(HashRipperError):
    """Error in configuration"""
    pass
