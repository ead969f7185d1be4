"""Random number source and discrete probability distributions."""
