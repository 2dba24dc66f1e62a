"""Trestle: versioned CRUD API for projects, materials and logistics."""
