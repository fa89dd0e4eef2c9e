"""Helpers shared by the AssetShelf server and client."""
