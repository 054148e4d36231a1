"""
Fleet core REST API

A small service exposing a paginated, link-navigable collection
of aircraft records. See ``fleet_core.api`` for the HTTP surface.
"""

__version__ = "0.1.0"
