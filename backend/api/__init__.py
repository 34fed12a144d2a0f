"""HTTP routes exposing the classroom points helpers."""
