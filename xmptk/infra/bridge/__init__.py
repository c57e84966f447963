"""Boundary bridge over libexempi.

Modules:
    lifecycle: One-shot engine initialization
    boundary_error: Error record and native-failure interception
    strings: Owned text buffers
    handles: Owners for native objects
    meta_bridge, file_bridge, iterator_bridge, path_bridge, datetime_bridge:
        The bridge entry points, one module per object kind
"""
