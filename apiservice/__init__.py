"""HTTP API microservice: public and internal Flask servers, YAML configuration, JSON logging, an expiring cache and a data access layer."""

__version__ = "0.1.0"