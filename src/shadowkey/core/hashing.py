""" Utility for hashing operations. """

from Crypto.Hash import keccak


def calculate_keccak256(*chunks: bytes) -> bytes:

    # Keccak-256 (pre-standard SHA-3 padding) over the concatenation of chunks.

    h = keccak.new(digest_bits=256)
    for chunk in chunks:
        h.update(chunk)
    return h.digest()
