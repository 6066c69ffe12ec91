"""Form page package: field state and HTML rendering."""
