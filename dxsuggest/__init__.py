"""
Phenotype driven diagnosis suggestion service
"""
