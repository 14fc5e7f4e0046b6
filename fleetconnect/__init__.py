"""fleet-connect: reach one machine in a multi-provider fleet by name."""

__version__ = "0.1.0"
