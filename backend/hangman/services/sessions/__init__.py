"""Session services: code generation, the in-memory registry and presence."""
