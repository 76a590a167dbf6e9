"""Barcode wallet core: ordered entry storage and a draggable floating action."""
