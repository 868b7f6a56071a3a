"""Chat command modules - parse text commands and render replies."""
