"""
Orbital mechanics primitives: Lambert solver, two-body propagation, swingby geometry.
"""
