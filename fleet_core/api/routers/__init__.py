"""
Fleet core router modules for handling requests to various endpoints

The order of the routers defines the order of the endpoints in the OpenAPI documentation.
"""

from . import aircraft, generic
