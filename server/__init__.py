"""AssetShelf upload server."""
