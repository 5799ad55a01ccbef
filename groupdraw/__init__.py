"""World Cup group draw simulator."""

__version__ = "1.0.0"
