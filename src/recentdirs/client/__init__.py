"""rd command-line client."""
