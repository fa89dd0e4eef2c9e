"""Command-line client and upload coordinator for the AssetShelf server."""
