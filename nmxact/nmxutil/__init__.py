"""Shared errors, CBOR helpers, sequence numbers and synchronisation primitives."""