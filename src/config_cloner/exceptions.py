class ValidationError(ValueError):
    """Invalid user input detected before any remote command is issued."""
