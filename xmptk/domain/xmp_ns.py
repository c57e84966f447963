"""Module: xmp_ns.py

Date: 2026-01-15

Namespace URIs of the standard XMP schemas.

These are pre-registered by the engine; custom schemas must be registered
with :meth:`XmpMeta.register_namespace` before use.
"""

# Basic schemas
XMP = "http://ns.adobe.com/xap/1.0/"
XMP_RIGHTS = "http://ns.adobe.com/xap/1.0/rights/"
XMP_MM = "http://ns.adobe.com/xap/1.0/mm/"
XMP_BJ = "http://ns.adobe.com/xap/1.0/bj/"

# Application schemas
PDF = "http://ns.adobe.com/pdf/1.3/"
PHOTOSHOP = "http://ns.adobe.com/photoshop/1.0/"
EXIF = "http://ns.adobe.com/exif/1.0/"
EXIF_AUX = "http://ns.adobe.com/exif/1.0/aux/"
TIFF = "http://ns.adobe.com/tiff/1.0/"
CAMERA_RAW = "http://ns.adobe.com/camera-raw-settings/1.0/"

# Qualifiers
IDENTIFIER_QUAL = "http://ns.adobe.com/xmp/Identifier/qual/1.0/"

# Field types
DIMENSIONS = "http://ns.adobe.com/xap/1.0/sType/Dimensions#"
IMAGE = "http://ns.adobe.com/xap/1.0/g/img/"
RESOURCE_EVENT = "http://ns.adobe.com/xap/1.0/sType/ResourceEvent#"
RESOURCE_REF = "http://ns.adobe.com/xap/1.0/sType/ResourceRef#"
ST_VERSION = "http://ns.adobe.com/xap/1.0/sType/Version#"
ST_JOB = "http://ns.adobe.com/xap/1.0/sType/Job#"

# XML namespaces
DC = "http://purl.org/dc/elements/1.1/"
IPTC_CORE = "http://iptc.org/std/Iptc4xmpCore/1.0/xmlns/"
IPTC_EXT = "http://iptc.org/std/Iptc4xmpExt/2008-02-29/"
RDF = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XML = "http://www.w3.org/XML/1998/namespace"
