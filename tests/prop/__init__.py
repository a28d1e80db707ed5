"""
Property-based tests for the binschema decoder.

Strategies pack random values with `struct` and check that decoding the
matching schema returns them and consumes exactly the packed bytes.
"""
