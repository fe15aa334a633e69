"""Signal fusion and gesture classification."""
