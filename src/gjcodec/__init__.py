"""
gjcodec - codec for the game servers' indexed text format.

The servers speak a delimiter-based format: records are lists of values
(positional) or key/value pairs (keyed) joined by a per-record-kind
delimiter, and responses bundle several '#'-separated sections of such
records.

Layers:
    schema          field types and record declarations
    serde           scalar and record codec
    model           records the servers send back
    response        whole-response decoding and cross-referencing
    request         records sent to the servers

ARCHITECTURAL GUARANTEE:
------------------------
This package does no I/O. It never opens a connection, it only turns
response bodies into records and request records into form data.
"""

__version__ = "0.1.0"
