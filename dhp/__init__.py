"""Docker HTTP Provider (DHP).

Small HTTP service that turns routing labels on running containers into a
dynamic configuration document for a reverse proxy:
 - label extraction (single router or several router/service pairs)
 - configuration synthesis against a base address
 - a polling endpoint serving the document as YAML

Every request re-reads the container engine; nothing is cached.
"""

__version__ = "0.3.0"
