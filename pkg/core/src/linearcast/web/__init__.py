"""HTTP surface for Linearcast."""
