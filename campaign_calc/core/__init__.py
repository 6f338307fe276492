"""
Core modules for Campaign Calc.

This package contains the decimal value type, rounding policies,
versioned calculation formulas and the calculation engine facade.
"""
