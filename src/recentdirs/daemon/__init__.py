"""rd daemon: FastAPI front end for the directory usage engine."""
