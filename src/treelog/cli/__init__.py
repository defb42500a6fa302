"""treelog command line interface."""
