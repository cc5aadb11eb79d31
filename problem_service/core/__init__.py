"""Core problem details model, translation and rendering."""
