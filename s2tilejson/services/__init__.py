"""Metadata building and legacy-format conversion services.

Example:
    >>> from s2tilejson.services import builder, converter
    >>> metadata = builder.MetadataBuilder().commit()
    >>> converter.to_metadata(metadata) is metadata
    True
"""
