"""EchoRoom — idea, experiment, outcome and reflection tracking."""

__version__ = "0.1.0"
