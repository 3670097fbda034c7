"""Order settlement services: an Order Service and a Payment Service."""

__version__ = "0.1.0"
