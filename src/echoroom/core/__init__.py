"""EchoRoom engines."""
