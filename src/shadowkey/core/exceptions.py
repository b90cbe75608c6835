"""
Exceptions for the ShadowKey keystore
Everything derives from ShadowKeyError so callers have a general error catcher
"""


class ShadowKeyError(Exception):
    # general container for errors
    pass


class ConfigError(ShadowKeyError):
    # raised when configuration values are invalid
    pass


class StorageError(ShadowKeyError):
    # raised if reading / writing / deleting a key file fails
    pass


class KeyNotFoundError(StorageError):
    # raised if no key file exists for an address
    pass


class RandomSourceError(ShadowKeyError):
    # raised when the random source fails or returns a short read
    pass


class KeyFileError(ShadowKeyError):
    # base for everything wrong with the contents of a key file
    pass


class MalformedKeyFileError(KeyFileError):
    # raised on invalid JSON, missing required fields or bad field values
    pass


class UnsupportedVersionError(KeyFileError):
    # raised when the key file version is not the supported one
    pass


class UnsupportedCipherError(KeyFileError):
    # raised when the cipher is not aes-128-ctr
    pass


class UnsupportedKDFError(KeyFileError):
    # raised when the kdf is neither scrypt nor pbkdf2
    pass


class UnsupportedPRFError(KeyFileError):
    # raised when a pbkdf2 key file names a prf other than hmac-sha256
    pass


class AuthenticationError(ShadowKeyError):
    # raised on MAC mismatch; wrong passphrase and tampering look the same
    pass
